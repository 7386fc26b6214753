"""
LLM 适配器 - 实现 ContentAnalyzerPort

使用 LiteLLM 调用大模型，从文本中选出坐标轴并给出条目坐标。
返回内容先经 pydantic 校验（坐标、置信度截断到合法区间），再转换为领域对象。
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from litellm import completion
from pydantic import BaseModel, Field, ValidationError, field_validator

from quadsight.domain.models import AnalyzerOutput, Axes, Domain, ForcedAxes, Item
from quadsight.infrastructure.errors import retry
from quadsight.ports.interfaces import (
    AnalyzerError,
    AnalyzerUnavailableError,
    ContentAnalyzerPort,
)


logger = logging.getLogger(__name__)


# ==================== 返回内容校验 ====================

def _clamp(value: float, low: float, high: float) -> float:
    if math.isnan(value):
        raise ValueError("value must be a number")
    return min(max(value, low), high)


class AxesPayload(BaseModel):
    x: str = Field(min_length=1)
    y: str = Field(min_length=1)
    rationale: str = ""


class ItemPayload(BaseModel):
    name: str = Field(min_length=1)
    x: float
    y: float
    confidence: float
    rationale: str = ""
    citations: List[str] = Field(default_factory=list)

    @field_validator("x", "y")
    @classmethod
    def clamp_coordinate(cls, v: float) -> float:
        return _clamp(v, 0.0, 100.0)

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        return _clamp(v, 0.0, 1.0)

    @field_validator("citations", mode="before")
    @classmethod
    def wrap_single_citation(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class AnalyzerPayload(BaseModel):
    """模型返回的 JSON 结构"""
    axes: AxesPayload
    items: List[ItemPayload]
    insights: List[str] = Field(default_factory=list)

    def to_output(self) -> AnalyzerOutput:
        return AnalyzerOutput(
            axes=Axes(
                x_label=self.axes.x,
                y_label=self.axes.y,
                rationale=self.axes.rationale,
            ),
            items=tuple(
                Item(
                    name=i.name,
                    x=i.x,
                    y=i.y,
                    confidence=i.confidence,
                    rationale=i.rationale,
                    citations=tuple(i.citations),
                )
                for i in self.items
            ),
            insights=tuple(self.insights),
        )


def strip_code_fences(content: str) -> str:
    """移除可能的 markdown 代码块标记"""
    content = re.sub(r'```json\s*', '', content)
    content = re.sub(r'```\s*', '', content)
    return content.strip()


# ==================== 适配器 ====================

class LiteLLMAnalyzerAdapter(ContentAnalyzerPort):
    """
    LiteLLM 适配器

    实现 ContentAnalyzerPort 接口。
    连接失败、超时统一抛出 AnalyzerUnavailableError（重试一次），
    返回内容不可用时抛出 AnalyzerError。
    """

    SYSTEM_PROMPT = (
        "You are an expert analyst who creates 2x2 matrices from complex information.\n"
        "You excel at identifying the most informative variable pairs and positioning items accurately.\n"
        "Always respond with valid JSON matching the requested structure."
    )

    DOMAIN_INSTRUCTIONS: Dict[Domain, str] = {
        Domain.RISK: """Domain: Risk Analysis
Focus on identifying risks and threats mentioned in the content.
Common X-axis variables: Probability, Likelihood, Frequency
Common Y-axis variables: Impact, Severity, Consequence, Damage
Look for: threats, vulnerabilities, potential issues, failure modes""",
        Domain.PRIORITY: """Domain: Priority/Project Management
Focus on tasks, projects, or initiatives mentioned in the content.
Common X-axis variables: Urgency, Time Sensitivity, Deadline Pressure
Common Y-axis variables: Importance, Value, Strategic Impact, Business Value
Look for: projects, tasks, initiatives, goals, objectives""",
        Domain.INVESTMENTS: """Domain: Investment Analysis
Focus on investment opportunities, assets, or financial instruments.
Common X-axis variables: Risk, Volatility, Uncertainty, Downside Risk
Common Y-axis variables: Return, Yield, Growth Potential, Expected Return
Look for: investments, stocks, assets, opportunities, financial instruments""",
        Domain.SPORTS: """Domain: Sports Analysis
Focus on players, teams, or sports-related entities.
Common X-axis variables: Current Performance, Skill Level, Experience
Common Y-axis variables: Potential, Growth Opportunity, Future Value
Look for: players, teams, strategies, performance metrics""",
        Domain.AUTO: """Domain: Auto-Detection
Analyze the content to determine the most appropriate domain and variables.
Consider what type of entities are being discussed and what dimensions would be most useful for analysis.
Choose variables that create clear separation and meaningful insights.""",
    }

    AUTO_AXES_INSTRUCTION = (
        "Automatically identify the two most informative and separating variables for the X and Y axes."
    )

    ANALYSIS_PROMPT = '''Analyze the following content and create a 2x2 matrix analysis:

{domain_instructions}

{axes_instruction}

Content to analyze:
"""
{text}
"""

Requirements:
1. Identify all distinct entities/items mentioned in the content
2. Select the two most informative variables for X and Y axes (0-100 scale)
3. Position each item on the matrix with confidence scores
4. Provide rationale for positioning decisions
5. Include relevant text citations
6. Generate 3-5 actionable insights

Return your analysis as JSON in this exact format:
{{
  "axes": {{
    "x": "X-axis variable name",
    "y": "Y-axis variable name",
    "rationale": "Why these variables were chosen and how they separate the items"
  }},
  "items": [
    {{
      "name": "Item name",
      "x": 75,
      "y": 60,
      "confidence": 0.85,
      "rationale": "Why this item is positioned here",
      "citations": ["Relevant quotes from the text"]
    }}
  ],
  "insights": [
    "Actionable insight 1",
    "Actionable insight 2",
    "Actionable insight 3"
  ]
}}

Important:
- X and Y values must be between 0-100
- Confidence must be between 0-1
- Include at least 3 items if possible
- Citations should be direct quotes from the text
- Insights should be specific and actionable
- Ensure JSON is valid and parseable'''

    def __init__(
        self,
        provider: Optional[str] = "openai",
        model: str = "gpt-4o",
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = 60.0,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ):
        """
        初始化适配器

        Args:
            provider: LLM 提供商（为空时 model 原样传给 LiteLLM）
            model: 模型名称
            api_key: API 密钥（可选）
            api_base: API 基础 URL（可选）
            timeout: 单次请求超时（秒）
        """
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.api_base = api_base
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def model_name(self) -> str:
        return f"{self.provider}/{self.model}" if self.provider else self.model

    def build_prompt(
        self,
        text: str,
        domain_hint: Domain = Domain.AUTO,
        forced_axes: Optional[ForcedAxes] = None,
    ) -> str:
        """构造用户提示词"""
        # 只有两个轴都指定时才强制模型使用
        if forced_axes and forced_axes.is_complete:
            axes_instruction = (
                f'You MUST use "{forced_axes.x}" as the X-axis and "{forced_axes.y}" as the Y-axis.'
            )
        else:
            axes_instruction = self.AUTO_AXES_INSTRUCTION

        return self.ANALYSIS_PROMPT.format(
            domain_instructions=self.DOMAIN_INSTRUCTIONS[Domain(domain_hint)],
            axes_instruction=axes_instruction,
            text=text,
        )

    @retry(max_attempts=2, delay=0.5, exceptions=(AnalyzerUnavailableError,))
    def _call_llm(self, messages: list, **kwargs) -> Any:
        """调用 LLM"""
        try:
            return completion(
                model=self.model_name,
                messages=messages,
                api_key=self.api_key,
                api_base=self.api_base,
                timeout=self.timeout,
                **kwargs,
            )
        except Exception as e:
            raise AnalyzerUnavailableError(
                f"LLM 调用失败: {str(e)}",
                source=self.model_name,
            )

    def analyze(
        self,
        text: str,
        domain_hint: Domain = Domain.AUTO,
        forced_axes: Optional[ForcedAxes] = None,
    ) -> AnalyzerOutput:
        """分析文本"""
        messages = [
            {"role": "system", "content": self.SYSTEM_PROMPT},
            {"role": "user", "content": self.build_prompt(text, domain_hint, forced_axes)},
        ]
        response = self._call_llm(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise AnalyzerError(f"LLM 响应结构异常: {e}", source=self.model_name)
        if not content:
            raise AnalyzerError("No response from LLM", source=self.model_name)

        return self.parse_response(content)

    def parse_response(self, content: str) -> AnalyzerOutput:
        """解析并校验模型返回的 JSON"""
        try:
            data = json.loads(strip_code_fences(content))
        except json.JSONDecodeError as e:
            raise AnalyzerError(f"LLM 返回的不是合法 JSON: {e}", source=self.model_name)

        try:
            payload = AnalyzerPayload.model_validate(data)
            output = payload.to_output()
        except (ValidationError, ValueError) as e:
            raise AnalyzerError(f"LLM 返回内容校验失败: {e}", source=self.model_name)

        logger.info(f"[LLM] 分析完成: {len(output.items)} 个条目, 坐标轴 {output.axes.x_label} / {output.axes.y_label}")
        return output

    def ping(self) -> bool:
        """连通性检查（失败时抛出 AnalyzerUnavailableError）"""
        try:
            response = completion(
                model=self.model_name,
                messages=[{"role": "user", "content": "Hello, this is a test."}],
                api_key=self.api_key,
                api_base=self.api_base,
                timeout=self.timeout,
                max_tokens=10,
            )
        except Exception as e:
            raise AnalyzerUnavailableError(f"LLM 连通性检查失败: {e}", source=self.model_name)
        return len(response.choices) > 0
