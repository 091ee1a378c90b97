"""Adapters to convert Pydantic validation models to domain models."""

from __future__ import annotations

from types import MappingProxyType

from indexarr.domain.indexers import definition as domain
from indexarr.infrastructure.definitions import validation_schema as infra


def to_domain_filters(
    blocks: list[infra.FilterBlock],
) -> tuple[domain.FilterSpec, ...]:
    """Known names become ``FilterName`` members; unknown ones stay raw."""
    return tuple(
        domain.FilterSpec(
            name=domain.FilterName.lookup(b.name) or b.name,
            args=tuple(b.args),
        )
        for b in blocks
    )


def to_domain_selector(pydantic: infra.SelectorBlock) -> domain.SelectorRule:
    return domain.SelectorRule(
        selector=pydantic.selector.strip(),
        attribute=pydantic.attribute,
        optional=pydantic.optional,
        default=pydantic.default,
        case=MappingProxyType(dict(pydantic.case)),
        remove=pydantic.remove,
        text=pydantic.text,
        filters=to_domain_filters(pydantic.filters),
    )


def to_domain_rows(pydantic: infra.RowsBlock) -> domain.RowRule:
    return domain.RowRule(
        selector=pydantic.selector.strip(),
        after=pydantic.after,
        remove=pydantic.remove,
        filters=to_domain_filters(pydantic.filters),
    )


def to_domain_search_path(pydantic: infra.SearchPathBlock) -> domain.SearchPath:
    return domain.SearchPath(
        path=pydantic.path,
        method=pydantic.method,
        categories=tuple(pydantic.categories),
        inputs=MappingProxyType(dict(pydantic.inputs)),
        inherit_inputs=pydantic.inherit_inputs,
        follow_redirect=pydantic.follow_redirect,
    )


def to_domain_search(pydantic: infra.SearchBlockModel) -> domain.SearchBlock:
    return domain.SearchBlock(
        paths=tuple(to_domain_search_path(p) for p in pydantic.paths),
        inputs=MappingProxyType(dict(pydantic.inputs)),
        keywords_filters=to_domain_filters(pydantic.keywords_filters),
        rows=to_domain_rows(pydantic.rows),
        fields=MappingProxyType(
            {name: to_domain_selector(rule) for name, rule in pydantic.fields.items()}
        ),
    )


def to_domain_download(pydantic: infra.DownloadBlockModel) -> domain.DownloadRule:
    return domain.DownloadRule(
        selectors=tuple(to_domain_selector(s) for s in pydantic.selectors),
        method=pydantic.method,
    )


def to_domain_caps(pydantic: infra.CapsModel) -> domain.Capabilities:
    modes = pydantic.modes
    return domain.Capabilities(
        categories=MappingProxyType(dict(pydantic.categories)),
        category_mappings=tuple(
            domain.CategoryMapping(id=m.id, cat=m.cat, desc=m.desc, default=m.default)
            for m in pydantic.category_mappings
        ),
        modes=domain.SearchModes(
            search=tuple(modes.search),
            tv_search=tuple(modes.tv_search),
            movie_search=tuple(modes.movie_search),
            music_search=tuple(modes.music_search),
            book_search=tuple(modes.book_search),
        ),
        allow_raw_search=pydantic.allow_raw_search,
    )


def to_domain_settings(
    fields: list[infra.SettingsFieldModel],
) -> tuple[domain.SettingsField, ...]:
    return tuple(
        domain.SettingsField(
            name=f.name,
            type=f.type,
            label=f.label,
            default=f.default,
            options=MappingProxyType(dict(f.options)),
        )
        for f in fields
    )


def to_domain_login(pydantic: infra.LoginModel) -> domain.LoginBlock:
    captcha_type = pydantic.captcha.get("type") if pydantic.captcha else None
    return domain.LoginBlock(
        method=pydantic.method,
        path=pydantic.path,
        submit_path=pydantic.submit_path,
        inputs=MappingProxyType(dict(pydantic.inputs)),
        captcha_type=str(captcha_type) if captcha_type is not None else None,
    )


def to_domain_definition(
    pydantic: infra.IndexerDefinitionPydantic,
) -> domain.IndexerDefinition:
    """Convert validated Pydantic model to pure domain model."""
    return domain.IndexerDefinition(
        id=pydantic.id,
        name=pydantic.name,
        links=tuple(pydantic.links),
        description=pydantic.description,
        language=pydantic.language,
        type=pydantic.type,
        encoding=pydantic.encoding,
        legacy_links=tuple(pydantic.legacy_links),
        request_delay=pydantic.request_delay,
        follow_redirect=pydantic.follow_redirect,
        caps=to_domain_caps(pydantic.caps),
        settings=to_domain_settings(pydantic.settings),
        login=to_domain_login(pydantic.login) if pydantic.login else None,
        search=to_domain_search(pydantic.search) if pydantic.search else None,
        download=to_domain_download(pydantic.download) if pydantic.download else None,
    )
