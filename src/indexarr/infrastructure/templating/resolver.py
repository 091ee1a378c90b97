"""
Path template resolver for indexer definitions.

Renders ``{{ ... }}`` actions found in search paths and query inputs.
Deliberately tiny: only the documented bindings and transform functions
are evaluated, everything else is left in place and reported as
unresolved so callers can fall back to the base link.

Supported actions:
    {{ .Keywords }}                       keywords (percent-encoded)
    {{ .Query.Keywords }}                 alias of .Keywords
    {{ .Config.username }}                configuration value
    {{ re_replace .Keywords "%20" "-" }}  regex substitution
    {{ replace .Keywords "%20" "+" }}     literal substitution
    {{ .Keywords | replace "%20" "+" }}   pipeline, left to right
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Mapping
from urllib.parse import quote

import structlog

from indexarr.domain.indexers import IndexerDefinition, UnresolvedTemplateError
from indexarr.infrastructure.common.patterns import regex_replace
from indexarr.infrastructure.common.urls import join_url

log = structlog.get_logger(__name__)

_ACTION_RE = re.compile(r"\{\{(-?)(.*?)(-?)\}\}", re.DOTALL)
_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|`[^`]*`|\||[^\s|]+')
_CONFIG_PREFIX = ".Config."
_KEYWORD_FIELDS = frozenset({".Keywords", ".Query.Keywords"})


class _Unsupported(Exception):
    """Internal signal: the action uses a construct we do not evaluate."""


def _re_replace(value: str, pattern: str, replacement: str) -> str:
    try:
        return regex_replace(value, pattern, replacement)
    except re.error as e:
        log.warning("template_bad_pattern", pattern=pattern, error=str(e))
        return value


def _replace(value: str, old: str, new: str) -> str:
    return value.replace(old, new)


TEMPLATE_FUNCTIONS: dict[str, Callable[[str, str, str], str]] = {
    "re_replace": _re_replace,
    "replace": _replace,
}


@dataclass(frozen=True)
class TemplateContext:
    """Bindings available to template actions."""

    keywords: str = ""
    config: Mapping[str, str] = field(default_factory=dict)
    fallback: str = ""
    encode_keywords: bool = True

    def keyword_value(self) -> str:
        if self.encode_keywords:
            return quote(self.keywords, safe="")
        return self.keywords

    def config_value(self, name: str) -> str:
        value = self.config.get(name)
        return self.fallback if value is None else value


def _unquote(token: str) -> str:
    if token.startswith("`"):
        return token[1:-1]
    body = token[1:-1]
    return body.replace('\\"', '"').replace("\\\\", "\\")


def _is_literal(token: str) -> bool:
    return len(token) >= 2 and token[0] == token[-1] and token[0] in {'"', "`"}


def _term(token: str, ctx: TemplateContext) -> str:
    if _is_literal(token):
        return _unquote(token)
    if token in _KEYWORD_FIELDS:
        return ctx.keyword_value()
    if token.startswith(_CONFIG_PREFIX):
        name = token[len(_CONFIG_PREFIX) :]
        if name and "." not in name:
            return ctx.config_value(name)
    raise _Unsupported(token)


def _split_pipeline(tokens: list[str]) -> list[list[str]]:
    commands: list[list[str]] = [[]]
    for tok in tokens:
        if tok == "|":
            commands.append([])
        else:
            commands[-1].append(tok)
    if any(not cmd for cmd in commands):
        raise _Unsupported("|")
    return commands


def _call(name: str, args: list[str]) -> str:
    fn = TEMPLATE_FUNCTIONS.get(name)
    if fn is None or len(args) != 3:
        raise _Unsupported(name)
    return fn(args[0], args[1], args[2])


def _evaluate(body: str, ctx: TemplateContext) -> str:
    tokens = _TOKEN_RE.findall(body)
    if not tokens:
        raise _Unsupported(body)

    value: str | None = None
    for cmd in _split_pipeline(tokens):
        head, rest = cmd[0], cmd[1:]
        if head in TEMPLATE_FUNCTIONS:
            args = [_term(t, ctx) for t in rest]
            if value is not None:
                args.insert(0, value)
            value = _call(head, args)
        elif value is None and not rest:
            value = _term(head, ctx)
        else:
            raise _Unsupported(head)
    assert value is not None
    return value


def render(
    template: str,
    keywords: str = "",
    config: Mapping[str, str] | None = None,
    *,
    fallback: str = "",
    encode_keywords: bool = True,
) -> str:
    """Render *template* against keywords and configuration values.

    Missing configuration keys resolve to *fallback*. Keywords are
    percent-encoded before any transform runs unless *encode_keywords*
    is False.

    Raises:
        UnresolvedTemplateError: placeholder syntax remains after rendering.
    """
    ctx = TemplateContext(
        keywords=keywords,
        config=config or {},
        fallback=fallback,
        encode_keywords=encode_keywords,
    )

    out: list[str] = []
    pos = 0
    trim_next = False
    for match in _ACTION_RE.finditer(template):
        literal = template[pos : match.start()]
        if trim_next:
            literal = literal.lstrip()
        if match.group(1):
            literal = literal.rstrip()
        out.append(literal)

        raw = match.group(0)
        try:
            out.append(_evaluate(match.group(2), ctx))
        except _Unsupported:
            out.append(raw)
        trim_next = bool(match.group(3))
        pos = match.end()

    tail = template[pos:]
    out.append(tail.lstrip() if trim_next else tail)
    rendered = "".join(out)

    leftover = _find_unresolved(rendered)
    if leftover is not None:
        raise UnresolvedTemplateError(template, leftover)
    return rendered


def _find_unresolved(rendered: str) -> str | None:
    idx = rendered.find("{{")
    if idx < 0:
        return None
    end = rendered.find("}}", idx)
    return rendered[idx : end + 2] if end >= 0 else rendered[idx:]


def render_inputs(
    inputs: Mapping[str, str],
    keywords: str = "",
    config: Mapping[str, str] | None = None,
    *,
    fallback: str = "",
) -> dict[str, str]:
    """Render query-input values; httpx handles their URL encoding."""
    return {
        name: render(
            value,
            keywords,
            config,
            fallback=fallback,
            encode_keywords=False,
        )
        for name, value in inputs.items()
    }


def build_target_url(
    definition: IndexerDefinition,
    keywords: str = "",
    config: Mapping[str, str] | None = None,
    *,
    fallback: str = "",
    category: str | None = None,
) -> str:
    """Build the URL to fetch for *definition*'s first applicable search path.

    Falls back to the bare base link when the definition has no search
    path or the path cannot be fully rendered.
    """
    base = definition.base_link
    path = definition.search.first_path(category) if definition.search else None
    if path is None:
        return base

    bindings = {**definition.setting_defaults(), **(config or {})}
    try:
        rendered = render(path.path, keywords, bindings, fallback=fallback)
    except UnresolvedTemplateError as e:
        log.warning(
            "template_unresolved_fallback",
            indexer=definition.id,
            fragment=e.fragment,
            fallback_url=base,
        )
        return base
    return join_url(base, rendered)
