"""Content-Security-Policy source model and directive composer.

A policy is described by a `CspDirectiveSet`: an ordered, duplicate-free
list of `CspSource` values per `CspCategory`, plus the policy-wide clauses
(plugin-types, block-all-mixed-content, upgrade-insecure-requests,
referrer, report-uri). `render_csp()` turns it into the header value.

Usage:
    directives = (
        CspDirectiveSet()
        .with_sources(CspCategory.SCRIPT, [CspSource.self_(), "https://cdn.example.com"])
        .with_sources(CspCategory.OBJECT, [CspSource.none()])
    )
    render_csp(directives)
    # "script-src 'self' https://cdn.example.com; object-src 'none'"

Notes:
- Sources are compared by their rendered text, so `"'self'"` and
  `CspSource.self_()` collapse into one entry.
- Empty categories are skipped; an empty set renders as "".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Iterable, Union

from secure_headers.errors import ConfigurationError
from secure_headers.options import CspCategory
from secure_headers.validators import require_token

KEYWORDS = frozenset(
    {"self", "none", "unsafe-inline", "unsafe-eval", "strict-dynamic"}
)
HASH_ALGORITHMS = frozenset({"sha256", "sha384", "sha512"})
# base64 or base64url, optionally padded
BASE64_VALUE = re.compile(r"^[A-Za-z0-9+/_-]+={0,2}$")

SourceLike = Union["CspSource", str]


def _require_base64(value: str, parameter: str) -> str:
    value = require_token(value, parameter)
    if not BASE64_VALUE.match(value):
        raise ConfigurationError(parameter, "must be base64 or base64url encoded")
    return value


@dataclass(frozen=True, eq=False)
class CspSource:
    """One CSP source expression.

    Attributes:
        kind: "keyword", "nonce", "hash" or "uri".
        value: Keyword name, nonce token, "<alg>-<digest>" or URI text.
    """

    kind: str
    value: str

    @classmethod
    def keyword(cls, name: str) -> CspSource:
        name = name.strip().strip("'").lower()
        if name not in KEYWORDS:
            raise ConfigurationError("keyword", f"unknown CSP keyword {name!r}")
        return cls("keyword", name)

    @classmethod
    def self_(cls) -> CspSource:
        return cls("keyword", "self")

    @classmethod
    def none(cls) -> CspSource:
        return cls("keyword", "none")

    @classmethod
    def unsafe_inline(cls) -> CspSource:
        return cls("keyword", "unsafe-inline")

    @classmethod
    def unsafe_eval(cls) -> CspSource:
        return cls("keyword", "unsafe-eval")

    @classmethod
    def strict_dynamic(cls) -> CspSource:
        return cls("keyword", "strict-dynamic")

    @classmethod
    def nonce(cls, token: str) -> CspSource:
        return cls("nonce", _require_base64(token, "nonce"))

    @classmethod
    def hash(cls, algorithm: str, digest: str) -> CspSource:
        algorithm = algorithm.strip().lower()
        if algorithm not in HASH_ALGORITHMS:
            raise ConfigurationError(
                "algorithm", f"must be one of {', '.join(sorted(HASH_ALGORITHMS))}"
            )
        return cls("hash", f"{algorithm}-{_require_base64(digest, 'digest')}")

    @classmethod
    def uri(cls, text: str) -> CspSource:
        return cls("uri", require_token(text, "uri"))

    @classmethod
    def parse(cls, text: SourceLike) -> CspSource:
        """Build a source from plain text.

        Accepts quoted or bare keywords (`'self'`, `self`), quoted nonces and
        hashes (`'nonce-abc'`, `'sha256-...'`); everything else is a URI,
        host or scheme source.
        """
        if isinstance(text, CspSource):
            return text
        if not isinstance(text, str):
            raise ConfigurationError("source", f"expected a string, got {type(text).__name__}")
        raw = require_token(text, "source")
        quoted = raw.startswith("'") and raw.endswith("'") and len(raw) > 1
        if not quoted and "'" in raw:
            raise ConfigurationError("source", f"unbalanced quotes in {raw!r}")
        bare = raw[1:-1] if quoted else raw
        if "'" in bare:
            raise ConfigurationError("source", f"unbalanced quotes in {raw!r}")
        if bare.lower() in KEYWORDS:
            return cls("keyword", bare.lower())
        if quoted:
            if bare.startswith("nonce-"):
                return cls.nonce(bare[len("nonce-"):])
            alg, _, digest = bare.partition("-")
            if alg.lower() in HASH_ALGORITHMS and digest:
                return cls.hash(alg, digest)
            raise ConfigurationError("source", f"unknown quoted source {raw!r}")
        return cls("uri", raw)

    def render(self) -> str:
        if self.kind == "keyword":
            return f"'{self.value}'"
        if self.kind == "nonce":
            return f"'nonce-{self.value}'"
        if self.kind == "hash":
            return f"'{self.value}'"
        return self.value

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CspSource):
            return NotImplemented
        return self.render() == other.render()

    def __hash__(self) -> int:
        return hash(self.render())


def dedupe_sources(sources: Iterable[SourceLike]) -> tuple[CspSource, ...]:
    """Parse and collapse duplicates, keeping first-seen order."""
    seen: dict[CspSource, None] = {}
    for source in sources:
        parsed = CspSource.parse(source)
        if parsed not in seen:
            seen[parsed] = None
    return tuple(seen)


@dataclass(frozen=True)
class CspDirectiveSet:
    """Immutable set of CSP directives.

    `sources` holds `(category, sources)` pairs; use `sources_for()` and
    `with_sources()` rather than touching it directly.
    """

    sources: tuple[tuple[CspCategory, tuple[CspSource, ...]], ...] = field(default=())
    plugin_types: str | None = None
    block_all_mixed_content: bool = False
    upgrade_insecure_requests: bool = False
    referrer: str | None = None
    report_uri: str | None = None
    use_x_content_security_policy: bool = False

    def sources_for(self, category: CspCategory | str) -> tuple[CspSource, ...]:
        category = CspCategory.parse(category, "category")
        for cat, values in self.sources:
            if cat is category:
                return values
        return ()

    def with_sources(
        self,
        category: CspCategory | str,
        sources: Iterable[SourceLike],
        *,
        replace_existing: bool = False,
    ) -> CspDirectiveSet:
        """Return a copy with `sources` added to (or replacing) `category`."""
        category = CspCategory.parse(category, "category")
        incoming = list(sources)
        existing = () if replace_existing else self.sources_for(category)
        merged = dedupe_sources([*existing, *incoming])
        others = tuple((cat, vals) for cat, vals in self.sources if cat is not category)
        return replace(self, sources=others + ((category, merged),))


def render_csp(directives: CspDirectiveSet) -> str:
    """Compose the Content-Security-Policy header value."""
    by_category = dict(directives.sources)
    clauses: list[str] = []

    for category in CspCategory:
        values = by_category.get(category)
        if values:
            clauses.append(f"{category.value} {' '.join(v.render() for v in values)}")

    if directives.plugin_types:
        clauses.append(f"plugin-types {directives.plugin_types}")
    if directives.block_all_mixed_content:
        clauses.append("block-all-mixed-content")
    if directives.upgrade_insecure_requests:
        clauses.append("upgrade-insecure-requests")
    if directives.referrer:
        clauses.append(f"referrer {directives.referrer}")
    if directives.report_uri:
        clauses.append(f"report-uri {directives.report_uri}")

    return "; ".join(clauses)


__all__ = ["CspSource", "CspDirectiveSet", "dedupe_sources", "render_csp"]
