"""Taxonomy term wrappers: categories and tags.

A term name is resolved to an id by searching the taxonomy and taking the
first case-insensitive exact name match; when there is none the term is
created.  :meth:`TermAPI.resolve_ids` applies that to a list of names and
drops (with a warning) each name that cannot be resolved, so one bad name
never fails the publish.
"""

from __future__ import annotations

from typing import Any

from notepress.errors import NotepressError, NotepressTaxonomyError, error_code_value
from notepress.models import ConversionWarning
from notepress.observability import NoopMetricsHook, fields, get_logger

from .transport import AsyncWordPressTransport, WordPressTransport

log = get_logger("notepress.terms")

TAXONOMIES = ("categories", "tags")

SEARCH_PAGE_SIZE = 100


def _as_id(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise NotepressTaxonomyError(
            message=f"Term {name!r} has an invalid id: {value!r}",
            context={"name": name, "id": value},
            cause=exc,
        ) from exc


def find_term(terms: Any, name: str) -> int | None:
    """Id of the first term in *terms* whose name equals *name*, ignoring case.

    Raises
    ------
    NotepressTaxonomyError
        If the matching term's id is not an integer.
    """
    if not isinstance(terms, list):
        return None
    wanted = name.lower()
    for term in terms:
        if isinstance(term, dict) and "id" in term and str(term.get("name", "")).lower() == wanted:
            return _as_id(term["id"], name)
    return None


def _term_id(created: Any, taxonomy: str, name: str) -> int:
    if not isinstance(created, dict) or "id" not in created:
        raise NotepressTaxonomyError(
            message=f"Creating {taxonomy} term {name!r} returned no id",
            context={"taxonomy": taxonomy, "name": name},
        )
    return _as_id(created["id"], name)


def _check_taxonomy(taxonomy: str) -> None:
    if taxonomy not in TAXONOMIES:
        raise ValueError(f"taxonomy must be one of {TAXONOMIES}, got {taxonomy!r}")


def _dropped(taxonomy: str, name: str, exc: NotepressError, metrics: Any) -> ConversionWarning:
    metrics.increment("notepress.taxonomy_failure_total", tags={"taxonomy": taxonomy})
    log.warning(
        "Dropping unresolvable term",
        extra=fields(op="resolve_terms", taxonomy=taxonomy, name=name, error=exc.message),
    )
    return ConversionWarning(
        code="TAXONOMY_UNRESOLVED",
        message=f"Failed to resolve {taxonomy} term {name!r}: {exc.message}",
        context={"taxonomy": taxonomy, "name": name, "error_code": error_code_value(exc.code)},
    )


class TermAPI:
    """Synchronous get-or-create for one taxonomy.

    Parameters
    ----------
    transport:
        A configured :class:`WordPressTransport` instance.
    taxonomy:
        ``"categories"`` or ``"tags"``.
    metrics:
        Receives ``notepress.taxonomy_failure_total`` for dropped names.
    """

    def __init__(
        self,
        transport: WordPressTransport,
        taxonomy: str,
        metrics: Any | None = None,
    ) -> None:
        _check_taxonomy(taxonomy)
        self._transport = transport
        self.taxonomy = taxonomy
        self._metrics = metrics if metrics is not None else NoopMetricsHook()

    def search(self, name: str) -> list[dict[str, Any]]:
        return self._transport.request(
            "GET",
            f"/{self.taxonomy}",
            params={"search": name, "per_page": SEARCH_PAGE_SIZE},
        )

    def create(self, name: str) -> dict[str, Any]:
        return self._transport.request("POST", f"/{self.taxonomy}", json={"name": name})

    def get_or_create(self, name: str) -> int:
        """Return the id of the term called *name*, creating it if needed."""
        existing = find_term(self.search(name), name)
        if existing is not None:
            return existing
        return _term_id(self.create(name), self.taxonomy, name)

    def resolve_ids(self, names: list[str]) -> tuple[list[int], list[ConversionWarning]]:
        """Resolve *names* in order.

        Returns
        -------
        tuple[list[int], list[ConversionWarning]]
            The ids of the names that resolved and one warning per name
            that was dropped.
        """
        ids: list[int] = []
        warnings: list[ConversionWarning] = []
        for name in names:
            try:
                ids.append(self.get_or_create(name))
            except NotepressError as exc:
                warnings.append(_dropped(self.taxonomy, name, exc, self._metrics))
        return ids, warnings


class AsyncTermAPI:
    """Asynchronous get-or-create for one taxonomy.

    Mirrors :class:`TermAPI`; names are resolved one after another.
    """

    def __init__(
        self,
        transport: AsyncWordPressTransport,
        taxonomy: str,
        metrics: Any | None = None,
    ) -> None:
        _check_taxonomy(taxonomy)
        self._transport = transport
        self.taxonomy = taxonomy
        self._metrics = metrics if metrics is not None else NoopMetricsHook()

    async def search(self, name: str) -> list[dict[str, Any]]:
        return await self._transport.request(
            "GET",
            f"/{self.taxonomy}",
            params={"search": name, "per_page": SEARCH_PAGE_SIZE},
        )

    async def create(self, name: str) -> dict[str, Any]:
        return await self._transport.request("POST", f"/{self.taxonomy}", json={"name": name})

    async def get_or_create(self, name: str) -> int:
        existing = find_term(await self.search(name), name)
        if existing is not None:
            return existing
        return _term_id(await self.create(name), self.taxonomy, name)

    async def resolve_ids(self, names: list[str]) -> tuple[list[int], list[ConversionWarning]]:
        ids: list[int] = []
        warnings: list[ConversionWarning] = []
        for name in names:
            try:
                ids.append(await self.get_or_create(name))
            except NotepressError as exc:
                warnings.append(_dropped(self.taxonomy, name, exc, self._metrics))
        return ids, warnings
