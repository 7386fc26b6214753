"""
边界规则求值器 - 受限的象限规则表达式语言

语法（优先级由低到高）：

    expr     := orExpr
    orExpr   := andExpr ( "||" andExpr )*
    andExpr  := cmpExpr ( "&&" cmpExpr )*
    cmpExpr  := operand ("<"|"<="|">"|">="|"=="|"!=") operand | "(" expr ")"
    operand  := "x" | "y" | number

设计原则：
1. 只允许 x、y 两个变量、数字字面量、比较运算符、&& / || 与括号
2. 不执行任何动态代码：规则被解析为表达式树，再递归求值
3. 解析失败一律抛出 RuleParseError，绝不静默地当作 true/false
4. 纯函数：同一规则 + 同一坐标永远得到同一结果

示例：
    >>> rule = compile_rule("x >= 50 && y >= 50")
    >>> rule.evaluate(75, 80)
    True
    >>> compile_rule("x > 50 && alert(1)")
    Traceback (most recent call last):
    RuleParseError: 不允许的标识符 'alert' (位置 10)
"""

import operator
import re
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union


# 规则长度与嵌套深度上限
MAX_RULE_LENGTH = 1024
MAX_NESTING_DEPTH = 32

VARIABLES = ("x", "y")


class RuleParseError(ValueError):
    """规则文本非法（含不允许的记号或结构错误）"""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        rule_text: str = "",
    ):
        self.message = message
        self.position = position
        self.rule_text = rule_text
        if position is not None:
            message = f"{message} (位置 {position})"
        super().__init__(message)


# ==================== 表达式树 ====================

@dataclass(frozen=True)
class Literal:
    """数字字面量"""
    value: float


@dataclass(frozen=True)
class Var:
    """变量引用（x 或 y）"""
    name: str


@dataclass(frozen=True)
class Compare:
    """二元比较"""
    op: str
    left: Union[Literal, Var]
    right: Union[Literal, Var]


@dataclass(frozen=True)
class And:
    """逻辑与（n 元）"""
    operands: Tuple["Node", ...]


@dataclass(frozen=True)
class Or:
    """逻辑或（n 元）"""
    operands: Tuple["Node", ...]


Node = Union[Literal, Var, Compare, And, Or]


_COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}


# ==================== 词法分析 ====================

@dataclass(frozen=True)
class Token:
    kind: str       # NUMBER, VAR, CMP, AND, OR, LPAREN, RPAREN, MINUS, END
    value: str
    position: int


_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?|\.[0-9]+")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_WHITESPACE = frozenset(" \t\r\n")

_TWO_CHAR_TOKENS = {
    "&&": "AND",
    "||": "OR",
    "<=": "CMP",
    ">=": "CMP",
    "==": "CMP",
    "!=": "CMP",
}

_ONE_CHAR_TOKENS = {
    "<": "CMP",
    ">": "CMP",
    "(": "LPAREN",
    ")": "RPAREN",
    "-": "MINUS",
}


def tokenize(text: str) -> List[Token]:
    """将规则文本切分为记号序列"""
    tokens: List[Token] = []
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if char in _WHITESPACE:
            i += 1
            continue

        number = _NUMBER_RE.match(text, i)
        if number:
            tokens.append(Token("NUMBER", number.group(), i))
            i = number.end()
            # 数字后紧跟字母（如 "50x"）视为非法
            if i < length and (text[i].isalpha() or text[i] == "_" or text[i] == "."):
                raise RuleParseError(f"非法的数字字面量 '{text[number.start():i + 1]}'", number.start(), text)
            continue

        ident = _IDENT_RE.match(text, i)
        if ident:
            name = ident.group()
            if name not in VARIABLES:
                raise RuleParseError(f"不允许的标识符 '{name}'", i, text)
            tokens.append(Token("VAR", name, i))
            i = ident.end()
            continue

        pair = text[i:i + 2]
        if pair in _TWO_CHAR_TOKENS:
            tokens.append(Token(_TWO_CHAR_TOKENS[pair], pair, i))
            i += 2
            continue

        if char in _ONE_CHAR_TOKENS:
            tokens.append(Token(_ONE_CHAR_TOKENS[char], char, i))
            i += 1
            continue

        raise RuleParseError(f"不允许的字符 '{char}'", i, text)

    tokens.append(Token("END", "", length))
    return tokens


# ==================== 语法分析 ====================

class _Parser:
    """递归下降解析器"""

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "END":
            self.index += 1
        return token

    def _error(self, message: str, token: Token) -> RuleParseError:
        return RuleParseError(message, token.position, self.text)

    def parse(self) -> Node:
        node = self._parse_or()
        token = self._peek()
        if token.kind == "RPAREN":
            raise self._error("括号不匹配：多余的 ')'", token)
        if token.kind != "END":
            raise self._error(f"意外的记号 '{token.value}'", token)
        return node

    def _parse_or(self) -> Node:
        operands = [self._parse_and()]
        while self._peek().kind == "OR":
            self._advance()
            operands.append(self._parse_and())
        return operands[0] if len(operands) == 1 else Or(tuple(operands))

    def _parse_and(self) -> Node:
        operands = [self._parse_comparison()]
        while self._peek().kind == "AND":
            self._advance()
            operands.append(self._parse_comparison())
        return operands[0] if len(operands) == 1 else And(tuple(operands))

    def _parse_comparison(self) -> Node:
        token = self._peek()

        if token.kind == "LPAREN":
            self._advance()
            self.depth += 1
            if self.depth > MAX_NESTING_DEPTH:
                raise self._error(f"括号嵌套超过上限 {MAX_NESTING_DEPTH}", token)
            node = self._parse_or()
            closing = self._peek()
            if closing.kind != "RPAREN":
                raise self._error("括号不匹配：缺少 ')'", closing)
            self._advance()
            self.depth -= 1
            return node

        left = self._parse_operand()
        op_token = self._peek()
        if op_token.kind != "CMP":
            raise self._error("缺少比较运算符", op_token)
        self._advance()
        right = self._parse_operand()
        return Compare(op_token.value, left, right)

    def _parse_operand(self) -> Union[Literal, Var]:
        token = self._advance()

        if token.kind == "VAR":
            return Var(token.value)
        if token.kind == "NUMBER":
            return Literal(float(token.value))
        if token.kind == "MINUS":
            number = self._advance()
            if number.kind != "NUMBER":
                raise self._error("'-' 之后必须是数字", number)
            return Literal(-float(number.value))

        if token.kind == "END":
            raise self._error("缺少操作数：表达式提前结束", token)
        raise self._error(f"缺少操作数，遇到 '{token.value}'", token)


# ==================== 求值 ====================

def _evaluate_node(node: Node, x: float, y: float):
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Var):
        return x if node.name == "x" else y
    if isinstance(node, Compare):
        return _COMPARATORS[node.op](
            _evaluate_node(node.left, x, y),
            _evaluate_node(node.right, x, y),
        )
    if isinstance(node, And):
        return all(_evaluate_node(operand, x, y) for operand in node.operands)
    if isinstance(node, Or):
        return any(_evaluate_node(operand, x, y) for operand in node.operands)
    raise TypeError(f"未知的表达式节点: {type(node).__name__}")


def _collect_variables(node: Node) -> FrozenSet[str]:
    if isinstance(node, Var):
        return frozenset((node.name,))
    if isinstance(node, Compare):
        return _collect_variables(node.left) | _collect_variables(node.right)
    if isinstance(node, (And, Or)):
        names: FrozenSet[str] = frozenset()
        for operand in node.operands:
            names |= _collect_variables(operand)
        return names
    return frozenset()


@dataclass(frozen=True)
class Rule:
    """已编译的边界规则"""
    text: str
    root: Node

    def evaluate(self, x: float, y: float) -> bool:
        """在坐标 (x, y) 处求值"""
        return bool(_evaluate_node(self.root, float(x), float(y)))

    def variables(self) -> FrozenSet[str]:
        """规则中引用到的变量"""
        return _collect_variables(self.root)

    def __str__(self) -> str:
        return self.text


def compile_rule(text: str) -> Rule:
    """
    编译规则文本

    Args:
        text: 规则文本，如 "x >= 50 && y < 50"

    Returns:
        Rule: 可重复求值的规则对象

    Raises:
        RuleParseError: 规则含有不允许的记号或结构错误
    """
    if not isinstance(text, str):
        raise RuleParseError(f"规则必须是字符串，而不是 {type(text).__name__}")
    if len(text) > MAX_RULE_LENGTH:
        raise RuleParseError(f"规则过长（上限 {MAX_RULE_LENGTH} 个字符）", rule_text=text[:50])
    if not text.strip():
        raise RuleParseError("规则不能为空", rule_text=text)

    tokens = tokenize(text)
    root = _Parser(text, tokens).parse()
    return Rule(text=text, root=root)


def evaluate(rule: Rule, x: float, y: float) -> bool:
    """对已编译规则求值（纯函数）"""
    return rule.evaluate(x, y)
