"""
分析领域配置 - 供前端领域选择器展示

每个领域给出名称、说明、常用坐标轴和示例场景，顺序即展示顺序。
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from quadsight.domain.models import Domain


@dataclass(frozen=True)
class DomainProfile:
    """领域展示信息"""
    domain: Domain
    name: str
    description: str
    common_x_axes: Tuple[str, ...] = ()
    common_y_axes: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.domain.value,
            "name": self.name,
            "description": self.description,
            "common_axes": {
                "x": list(self.common_x_axes),
                "y": list(self.common_y_axes),
            },
            "examples": list(self.examples),
        }


DOMAIN_PROFILES: Dict[Domain, DomainProfile] = {
    Domain.RISK: DomainProfile(
        domain=Domain.RISK,
        name="Risk Analysis",
        description="Analyze risks by impact and probability",
        common_x_axes=("Probability", "Likelihood", "Frequency", "Chance"),
        common_y_axes=("Impact", "Severity", "Consequence", "Damage"),
        examples=(
            "Cybersecurity threats assessment",
            "Project risk evaluation",
            "Business continuity planning",
        ),
    ),
    Domain.PRIORITY: DomainProfile(
        domain=Domain.PRIORITY,
        name="Priority Matrix",
        description="Prioritize items by importance and urgency",
        common_x_axes=("Urgency", "Time Sensitivity", "Deadline Pressure"),
        common_y_axes=("Importance", "Value", "Strategic Impact", "Business Value"),
        examples=(
            "Project prioritization",
            "Feature backlog management",
            "Resource allocation decisions",
        ),
    ),
    Domain.INVESTMENTS: DomainProfile(
        domain=Domain.INVESTMENTS,
        name="Investment Analysis",
        description="Evaluate investments by risk and return",
        common_x_axes=("Risk", "Volatility", "Uncertainty", "Downside Risk"),
        common_y_axes=("Return", "Yield", "Growth Potential", "Expected Return"),
        examples=(
            "Portfolio optimization",
            "Startup investment evaluation",
            "Market opportunity assessment",
        ),
    ),
    Domain.SPORTS: DomainProfile(
        domain=Domain.SPORTS,
        name="Sports Analysis",
        description="Analyze sports performance and strategy",
        common_x_axes=("Skill", "Technical Ability", "Performance Level"),
        common_y_axes=("Potential", "Growth Opportunity", "Market Value"),
        examples=(
            "Player performance analysis",
            "Team strategy evaluation",
            "Transfer market assessment",
        ),
    ),
    # 自动识别没有预设坐标轴
    Domain.AUTO: DomainProfile(
        domain=Domain.AUTO,
        name="Auto-Detect",
        description="Let AI automatically determine the best variables",
        examples=(
            "Any document or text analysis",
            "Exploratory data analysis",
            "General purpose categorization",
        ),
    ),
}


def list_domain_profiles() -> Tuple[DomainProfile, ...]:
    """按枚举顺序返回全部领域"""
    return tuple(DOMAIN_PROFILES[domain] for domain in Domain)
