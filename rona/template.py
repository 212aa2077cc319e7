"""
Commit message templates.

Two surface syntaxes are supported:
    {name}                  placeholder, replaced by the variable's value
    {?name}...{/name}       conditional block, kept only when `name` has a value

Templates are tokenized by a single linear scan. Validation and rendering both
work on that token list, so substituted values are never re-scanned.
"""

from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .errors import RonaError
from .schemas import TemplateVariables


class Variable(str, Enum):
    COMMIT_NUMBER = "commit_number"
    COMMIT_TYPE = "commit_type"
    BRANCH_NAME = "branch_name"
    MESSAGE = "message"
    DATE = "date"
    TIME = "time"
    AUTHOR = "author"
    EMAIL = "email"

    @classmethod
    def parse(cls, name: str) -> Optional["Variable"]:
        try:
            return cls(name)
        except ValueError:
            return None


VALID_VARIABLES = tuple(variable.value for variable in Variable)

DEFAULT_TEMPLATE = (
    "{?commit_number}[{commit_number}] {/commit_number}"
    "({commit_type} on {branch_name}) {message}"
)
HEADER_TEMPLATE = (
    "{?commit_number}[{commit_number}] {/commit_number}"
    "({commit_type} on {branch_name})"
)


# --- Errors ---


class TemplateError(RonaError):
    title = "Template error"


class TemplateValidationError(TemplateError):
    pass


class TemplateRenderError(TemplateError):
    pass


class UnknownVariable(TemplateValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown template variable: {{{name}}}. "
            f"Valid variables are: {', '.join(VALID_VARIABLES)}"
        )


class UnknownConditionalVariable(TemplateValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown conditional variable: {{?{name}}}. "
            f"Valid variables are: {', '.join(VALID_VARIABLES)}"
        )


class UnmatchedClosingTag(TemplateValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Closing tag {{/{name}}} has no matching {{?{name}}}")


class UnclosedConditionalBlock(TemplateValidationError, TemplateRenderError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Conditional block {{?{name}}} is never closed by {{/{name}}}")


# --- Tokenizer ---


class TokenKind(Enum):
    TEXT = "text"
    PLACEHOLDER = "placeholder"
    OPEN = "open"
    CLOSE = "close"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str  # literal text, or the tag's variable name
    offset: int


def tokenize(template: str) -> List[Token]:
    """
    Splits a template into text and tag tokens.
    A tag is '{', one or more characters other than braces, then '}'.
    Braces that do not form a tag stay in the surrounding text.
    """
    tokens: List[Token] = []
    text_start = 0
    pos = 0

    while True:
        open_at = template.find("{", pos)
        if open_at == -1:
            break
        close_at = template.find("}", open_at + 1)
        if close_at == -1:
            break
        # innermost brace before the closer starts the tag
        open_at = template.rfind("{", open_at, close_at)
        content = template[open_at + 1 : close_at]
        pos = close_at + 1
        if not content:
            continue

        if open_at > text_start:
            tokens.append(
                Token(TokenKind.TEXT, template[text_start:open_at], text_start)
            )
        tokens.append(_tag_token(content, open_at))
        text_start = pos

    if text_start < len(template):
        tokens.append(Token(TokenKind.TEXT, template[text_start:], text_start))
    return tokens


def _tag_token(content: str, offset: int) -> Token:
    if content[0] == "?":
        return Token(TokenKind.OPEN, content[1:], offset)
    if content[0] == "/":
        return Token(TokenKind.CLOSE, content[1:], offset)
    return Token(TokenKind.PLACEHOLDER, content, offset)


# --- Validation ---


def validate_template(template: str) -> None:
    """
    Raises a TemplateValidationError if the template references an unknown
    variable or its conditional tags do not pair up.

    Each opening tag, left to right, is paired with the first not yet paired
    closing tag of the same name that follows it.
    """
    tokens = tokenize(template)

    unpaired_closers: Dict[str, List[int]] = defaultdict(list)
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.CLOSE:
            unpaired_closers[token.value].append(index)

    paired_names: List[str] = []
    for index, token in enumerate(tokens):
        if token.kind is not TokenKind.OPEN:
            continue
        candidates = unpaired_closers[token.value]
        position = bisect_right(candidates, index)
        if position == len(candidates):
            raise UnclosedConditionalBlock(token.value)
        candidates.pop(position)
        paired_names.append(token.value)

    leftover = sorted(
        (index, name) for name, indexes in unpaired_closers.items() for index in indexes
    )
    if leftover:
        raise UnmatchedClosingTag(leftover[0][1])

    for name in paired_names:
        if Variable.parse(name) is None:
            raise UnknownConditionalVariable(name)

    for token in tokens:
        if token.kind is TokenKind.PLACEHOLDER and Variable.parse(token.value) is None:
            raise UnknownVariable(token.value)


# --- Rendering ---


def resolve_conditionals(tokens: List[Token], values: Dict[str, str]) -> List[Token]:
    """
    Evaluates conditional blocks, leaving a flat list without opening tags.

    The first remaining opener is paired with the first closer of the same
    name after it. The block collapses to its inner tokens when the variable
    has a non-empty value and disappears otherwise. Inner tokens are scanned
    again, so blocks nested in a kept block are evaluated in turn.
    """
    resolved = list(tokens)
    index = 0
    while index < len(resolved):
        token = resolved[index]
        if token.kind is not TokenKind.OPEN:
            index += 1
            continue

        closer = _find_closer(resolved, token.value, index + 1)
        if closer is None:
            raise UnclosedConditionalBlock(token.value)

        if values.get(token.value):
            resolved[index : closer + 1] = resolved[index + 1 : closer]
        else:
            del resolved[index : closer + 1]
    return resolved


def _find_closer(tokens: List[Token], name: str, start: int) -> Optional[int]:
    for index in range(start, len(tokens)):
        token = tokens[index]
        if token.kind is TokenKind.CLOSE and token.value == name:
            return index
    return None


def render_template(template: str, variables: TemplateVariables) -> str:
    """
    Renders a template: conditional blocks first, then placeholder substitution.
    Unknown placeholders and stray closing tags render as empty strings.
    """
    values = variables.to_map()
    resolved = resolve_conditionals(tokenize(template), values)

    parts = []
    for token in resolved:
        if token.kind is TokenKind.TEXT:
            parts.append(token.value)
        elif token.kind is TokenKind.PLACEHOLDER:
            parts.append(values.get(token.value, ""))
    return "".join(parts)


def fallback_message(
    commit_type: str, branch_name: str, message: str, commit_number: int | None
) -> str:
    """Literal formatting used when a configured template is rejected."""
    if commit_number is None:
        return f"({commit_type} on {branch_name}) {message}"
    return f"[{commit_number}] ({commit_type} on {branch_name}) {message}"
