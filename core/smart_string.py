import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Placeholder token used while a smart string goes through key lookup
PLACEHOLDER_TOKEN = "###PH{0}###"

_SELECT_OPTION_START = re.compile(r'(\w+)\{')


def _find_placeholders(text: str) -> List[Tuple[int, int]]:
    """Spans of top-level balanced {...} groups."""
    spans = []
    depth = 0
    start = -1
    for i, c in enumerate(text):
        if c == '{':
            if depth == 0:
                start = i
            depth += 1
        elif c == '}' and depth > 0:
            depth -= 1
            if depth == 0:
                spans.append((start, i + 1))
    return spans


def extract_placeholders(text: str):
    """
    Replace {placeholders} with ###PH0###, ###PH1###, etc.

    Args:
        text: Smart string like "You have {count:plural:an item|{} items}"

    Returns:
        Tuple of (tokenized_text, placeholders) where placeholders is {token: original}
    """
    if not text:
        return text, {}

    placeholders = {}
    parts = []
    last = 0
    for index, (start, end) in enumerate(_find_placeholders(text)):
        token = PLACEHOLDER_TOKEN.format(index)
        placeholders[token] = text[start:end]
        parts.append(text[last:start])
        parts.append(token)
        last = end
    parts.append(text[last:])

    return "".join(parts), placeholders


def restore_placeholders(text: str, placeholders: Dict[str, str]) -> str:
    """Put the original placeholders back in place of their tokens."""
    if not text or not placeholders:
        return text

    for token, original in placeholders.items():
        text = text.replace(token, original)
    return text


def _split_pipes(text: str) -> List[str]:
    """Split on '|' that are not nested inside braces."""
    if not text:
        return []

    result = []
    current = []
    depth = 0
    for c in text:
        if c == '{':
            depth += 1
        elif c == '}':
            depth -= 1
        elif c == '|' and depth == 0:
            result.append("".join(current))
            current = []
            continue
        current.append(c)
    result.append("".join(current))
    return result


def _parse_select_options(options: str) -> List[Tuple[str, str]]:
    """Parse "male{He}female{She}other{They}" into [(key, value), ...]."""
    parsed = []
    pos = 0
    while True:
        match = _SELECT_OPTION_START.search(options, pos)
        if not match:
            break
        depth = 1
        i = match.end()
        while i < len(options) and depth:
            if options[i] == '{':
                depth += 1
            elif options[i] == '}':
                depth -= 1
            i += 1
        if depth:
            break
        parsed.append((match.group(1).lower(), options[match.end():i - 1]))
        pos = i
    return parsed


def _apply_plural(value: Any, options: str) -> str:
    if value is None or not options:
        return ""
    try:
        count = int(str(value))
    except ValueError:
        return str(value)

    forms = _split_pipes(options)
    if not forms:
        return ""
    if len(forms) == 1 or count == 1:
        return forms[0].replace("{}", str(count))
    return forms[1].replace("{}", str(count))


def _apply_select(value: Any, options: str) -> str:
    if value is None or not options:
        return ""

    key = str(value).lower()
    parsed = _parse_select_options(options)
    for option_key, option_value in parsed:
        if option_key == key:
            return option_value
    for option_key, option_value in parsed:
        if option_key == "other":
            return option_value
    return str(value)


def _apply_formatter(formatter: str, value: Any, options: str) -> str:
    formatter = formatter.lower()
    if formatter in ("plural", "p"):
        return _apply_plural(value, options)
    if formatter in ("select", "s"):
        return _apply_select(value, options)
    return "" if value is None else str(value)


def format_smart(text: str, args: Optional[Mapping[str, Any]]) -> str:
    """
    Fill {variable}, {variable:plural:one|many} and
    {variable:select:key{value}other{value}} placeholders from args.
    Placeholders whose variable is not in args are left untouched.
    """
    if not text or not args:
        return text

    result = text
    for start, end in _find_placeholders(text):
        placeholder = text[start:end]
        parts = placeholder[1:-1].split(":", 2)
        variable = parts[0].strip()
        if variable not in args:
            continue

        value = args[variable]
        if len(parts) == 1:
            replacement = "" if value is None else str(value)
        else:
            formatter = parts[1].strip()
            options = parts[2].strip() if len(parts) > 2 else ""
            replacement = _apply_formatter(formatter, value, options)
        result = result.replace(placeholder, replacement)

    return result
