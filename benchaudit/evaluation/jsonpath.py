"""Path expressions over JSON or YAML audit output.

Expressions use the ``{.field.sub[0]}`` template form; several templates and
literal text may be combined (``{.kind}/{.metadata.name}``). Missing keys
produce empty output instead of an error.
"""

import json
import logging
import re
from typing import Any, List

import yaml

from benchaudit.evaluation.operators import EvaluationError

logger = logging.getLogger(__name__)

_TEMPLATE_RE = re.compile(r'\{([^{}]*)\}')


class PathExpressionError(EvaluationError):
    """Path expression or its input cannot be used"""
    pass


def load_structured(text: str) -> Any:
    """
    Parse audit output as JSON, falling back to YAML.

    Raises:
        PathExpressionError: If the text is neither JSON nor YAML
    """
    try:
        return json.loads(text)
    except ValueError:
        pass

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PathExpressionError(f"failed to load YAML or JSON: {e}")


def parse_expression(expr: str) -> List[Any]:
    """Split a single expression such as ``.items[0].name`` into tokens"""
    expr = expr.strip()
    if expr.startswith('$'):
        expr = expr[1:]

    tokens: List[Any] = []
    i = 0
    length = len(expr)
    while i < length:
        char = expr[i]
        if char.isspace():
            i += 1
            continue
        if char == '.':
            i += 1
            start = i
            while i < length and expr[i] not in '.[':
                i += 1
            token = expr[start:i].strip()
            if not token:
                raise PathExpressionError(f"empty attribute name in {expr!r}")
            tokens.append(token)
            continue
        if char == '[':
            end = expr.find(']', i)
            if end == -1:
                raise PathExpressionError(f"missing closing bracket in {expr!r}")
            token = expr[i + 1:end].strip()
            i = end + 1
            if not token:
                raise PathExpressionError(f"empty bracket token in {expr!r}")
            if token[0] in '\'"' and token[-1] == token[0] and len(token) > 1:
                tokens.append(token[1:-1])
            elif token == '*':
                tokens.append('*')
            elif re.fullmatch(r'-?\d+', token):
                tokens.append(int(token))
            else:
                tokens.append(token)
            continue
        raise PathExpressionError(f"unexpected character {char!r} in {expr!r}")
    return tokens


def _walk(data: Any, tokens: List[Any]) -> List[Any]:
    current: List[Any] = [data]
    for token in tokens:
        next_values: List[Any] = []
        for item in current:
            if token == '*':
                if isinstance(item, dict):
                    next_values.extend(item.values())
                elif isinstance(item, list):
                    next_values.extend(item)
            elif isinstance(token, int):
                if isinstance(item, list) and -len(item) <= token < len(item):
                    next_values.append(item[token])
            elif isinstance(item, dict) and token in item:
                next_values.append(item[token])
        current = next_values
    return current


def _format_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(',', ':'), sort_keys=True)
    return str(value)


def execute_path(path: str, data: Any) -> str:
    """
    Evaluate a path template against parsed data.

    Returns:
        Matched values joined by a space, with any literal template text kept
    """
    if not path:
        return ''

    if not _TEMPLATE_RE.search(path):
        path = '{' + path + '}'

    parts = []
    last = 0
    for match in _TEMPLATE_RE.finditer(path):
        parts.append(path[last:match.start()])
        values = _walk(data, parse_expression(match.group(1)))
        parts.append(' '.join(_format_value(v) for v in values))
        last = match.end()
    parts.append(path[last:])

    return ''.join(parts)
