"""Results view service reconciling results, filters and attribute fetches."""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, Protocol

from vector_results.cache.attribute_cache import AttributeCache, BulkAttributeFetcher, FetchOutcome
from vector_results.commands.batcher import build_metadata_batch, zip_results
from vector_results.config import Settings, get_settings
from vector_results.errors import TransportError, ValidationError
from vector_results.filters.field_filter import (
    apply_visibility_override,
    compute_filtered_field_values,
    extract_filter_fields,
    format_attribute_value,
    is_override_active,
)
from vector_results.logging_config import dataset_context, get_logger
from vector_results.models.commands import MetadataBatch
from vector_results.models.diagnostics import AttributeDiagnostic, DiagnosticKind
from vector_results.models.results import (
    ColumnConfig,
    ColumnOrigin,
    ParsedAttributes,
    RenderRow,
    ResultRow,
    SortColumn,
    SortState,
)
from vector_results.pipeline import result_view
from vector_results.schema.deriver import (
    Columns,
    attribute_columns,
    default_columns,
    derive_columns,
    find_column,
    set_attribute_columns_visibility,
    set_column_visibility,
    visibility_key,
)
from vector_results.selection.selection_set import SelectionSet
from vector_results.storage.preferences import JsonFilePreferenceStore, VisibilityPreferenceStore

logger = get_logger(__name__)

ATTRIBUTE_LOAD_ERROR = "Could not load attributes"

SingleAttributeCommit = Callable[[str], Awaitable[str | None]]


class BulkMetadataFetcher(Protocol):
    """Capability returning one metadata entry per batch key."""

    async def fetch_metadata(self, batch: MetadataBatch) -> list[Any]: ...


class ResultsViewService:
    """Render-ready view model over the results of one vector set.

    The service owns the attribute cache, column schema, selection and
    view settings for the dataset being browsed and applies every change
    in a fixed order:
    1. Filter and sort the raw results
    2. Fetch attributes missing from the cache (only step that suspends)
    3. Grow the column schema from every cached attribute field
    4. Overlay filtered-only visibility and filtered field values

    Switching the dataset resets all per-dataset state and bumps the cache
    generation so fetches still in flight for the old dataset are dropped.
    """

    def __init__(
        self,
        fetcher: BulkAttributeFetcher,
        preferences: VisibilityPreferenceStore | None = None,
        settings: Settings | None = None,
        metadata_fetcher: BulkMetadataFetcher | None = None,
    ):
        """Initialize the results view service.

        Args:
            fetcher: Bulk attribute lookup (e.g. StoreClient)
            preferences: Visibility preference store (JSON file from settings if None)
            settings: Engine settings (global settings if None)
            metadata_fetcher: Bulk key metadata lookup (defaults to ``fetcher``
                when it provides ``fetch_metadata``)
        """
        self.settings = settings or get_settings()
        self.preferences = preferences or JsonFilePreferenceStore.from_settings(self.settings)
        self.metadata_fetcher = metadata_fetcher or (
            fetcher if hasattr(fetcher, "fetch_metadata") else None
        )
        self.cache = AttributeCache(fetcher)
        self.selection = SelectionSet()

        display = self.preferences.load_display_settings()
        self.show_attributes = display.show_attributes
        self.show_only_filtered_attributes = display.show_only_filtered_attributes

        self.key_name: str | None = None
        self.filter_text = ""
        self.sort_state = SortState()
        self.search_filter: str | None = None
        self.attribute_error: str | None = None

        self._results: list[ResultRow] = []
        self._filtered_fields: list[str] = []
        self._columns: Columns = default_columns(self._visibility)
        self._deferred_toggles: dict[str, bool] = {}
        self._diagnostics: list[AttributeDiagnostic] = []

    # ------------------------------------------------------------------
    # Dataset and results
    # ------------------------------------------------------------------
    def set_dataset(self, key_name: str) -> int:
        """Switch to another vector set and reset all per-dataset state.

        Returns:
            The cache generation for the new dataset
        """
        if key_name == self.key_name:
            return self.cache.generation

        self._flush_deferred_toggles(persist_only=True)
        self.key_name = key_name
        with dataset_context(key_name):
            generation = self.cache.activate(key_name)
            logger.info(f"Browsing '{key_name}' (generation {generation})")

        self._columns = default_columns(self._visibility)
        self._results = []
        self.selection.reset()
        self.sort_state = SortState()
        self.filter_text = ""
        self.attribute_error = None
        self._diagnostics.clear()
        return generation

    def set_results(self, results: Iterable[ResultRow | tuple[str, float]]) -> None:
        """Replace the raw result list for the current dataset."""
        self._results = [
            row if isinstance(row, ResultRow) else ResultRow.from_tuple(row)
            for row in results
        ]
        self.selection.retain(row.element for row in self._results)

    async def load_results(
        self, results: Iterable[ResultRow | tuple[str, float]]
    ) -> FetchOutcome | None:
        """Replace the raw results and fetch attributes they are missing."""
        self.set_results(results)
        return await self.refresh_attributes()

    @property
    def results(self) -> list[ResultRow]:
        return list(self._results)

    async def refresh_attributes(self) -> FetchOutcome | None:
        """Fetch missing attributes for the current results.

        Does nothing when attribute display is off or there are no results.
        Validation and transport failures are recorded as diagnostics and
        reported through :attr:`attribute_error`; they are not raised.

        Returns:
            The fetch outcome, or None when nothing was attempted or it failed
        """
        if not self.show_attributes or not self._results:
            return None
        with dataset_context(self.key_name):
            return await self._fetch_attributes()

    async def _fetch_attributes(self) -> FetchOutcome | None:
        generation = self.cache.generation
        elements = [row.element for row in self._results]
        try:
            outcome = await self.cache.fetch_missing(elements, generation)
        except (ValidationError, TransportError) as e:
            if generation != self.cache.generation:
                return None
            kind = (
                DiagnosticKind.VALIDATION
                if isinstance(e, ValidationError)
                else DiagnosticKind.TRANSPORT
            )
            logger.error(f"{ATTRIBUTE_LOAD_ERROR}: {e}")
            self.attribute_error = ATTRIBUTE_LOAD_ERROR
            self._record(kind, f"{ATTRIBUTE_LOAD_ERROR}: {e}")
            return None

        if outcome.applied:
            self.attribute_error = None
            self._rederive_schema()
        return outcome

    async def commit_attribute_edit(
        self, element: str, commit: SingleAttributeCommit
    ) -> ParsedAttributes | None:
        """Run an external attribute editor for one element and apply its result.

        Args:
            element: Element being edited
            commit: Editor returning the new raw payload, or None if cancelled

        Returns:
            The newly parsed attributes, or None if cancelled, invalid or stale
        """
        generation = self.cache.generation
        payload = await commit(element)
        if payload is None:
            return None
        if generation != self.cache.generation:
            logger.info(f"Dropping edit of '{element}' made for a previous dataset")
            return None

        with dataset_context(self.key_name):
            parsed = self.cache.update_one(element, payload)
            self._rederive_schema()
        return parsed

    async def describe_datasets(self, key_names: Sequence[str]) -> dict[str, Any]:
        """Fetch ``VINFO`` metadata for many keys with one bulk request.

        Raises:
            ValidationError: If any key name is invalid (nothing is sent)
            TransportError: If the request fails
        """
        if self.metadata_fetcher is None:
            raise TransportError("No metadata fetcher configured")
        batch = build_metadata_batch(key_names)
        return zip_results(batch, await self.metadata_fetcher.fetch_metadata(batch))

    # ------------------------------------------------------------------
    # Filters and sorting
    # ------------------------------------------------------------------
    def set_filter_text(self, text: str) -> None:
        self.filter_text = text or ""

    def click_sort(self, column: SortColumn) -> SortState:
        """Advance the sort cycle for a header click."""
        self.sort_state = result_view.next_sort_state(self.sort_state, column)
        return self.sort_state

    def set_search_filter(self, expression: str | None) -> None:
        """Set the structured filter expression used by the vector query."""

        def _apply():
            self.search_filter = expression or None
            self._filtered_fields = extract_filter_fields(expression)

        self._transition(_apply)

    @property
    def filtered_fields(self) -> list[str]:
        return list(self._filtered_fields)

    def set_show_attributes(self, enabled: bool) -> None:
        """Turn attribute columns on or off; call :meth:`refresh_attributes` after enabling."""

        def _apply():
            self.show_attributes = enabled

        self._transition(_apply)
        self._save_display_flags()

    def set_show_only_filtered_attributes(self, enabled: bool) -> None:

        def _apply():
            self.show_only_filtered_attributes = enabled

        self._transition(_apply)
        self._save_display_flags()

    @property
    def override_active(self) -> bool:
        return is_override_active(
            self.show_attributes, self.show_only_filtered_attributes, self._filtered_fields
        )

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------
    def toggle_column(
        self, name: str, visible: bool, origin: ColumnOrigin | None = None
    ) -> None:
        """Change a column's stored visibility and persist it.

        ``origin`` picks the attribute column when an attribute field shares a
        system column's name; without it the system column is toggled.
        While the filtered-only override is active, attribute column toggles
        are held back and applied once the override ends.
        """
        column = find_column(self._columns, name, origin)
        if column is None:
            logger.warning(f"Ignoring visibility change for unknown column '{name}'")
            return
        if not column.is_system and self.override_active:
            self._deferred_toggles[name] = visible
            logger.debug(f"Deferred visibility change for '{name}' until filtered-only mode ends")
            return

        self._columns = set_column_visibility(self._columns, name, visible, column.origin)
        self._persist_visibility(column.name, column.origin, visible)

    def set_all_attribute_columns(self, visible: bool) -> None:
        """Show or hide every attribute column."""
        columns = attribute_columns(self._columns)
        if self.override_active:
            self._deferred_toggles.update((column.name, visible) for column in columns)
            return

        self._columns = set_attribute_columns_visibility(self._columns, visible)
        for column in columns:
            if column.visible != visible:
                self._persist_visibility(column.name, "attribute", visible)

    @property
    def stored_columns(self) -> Columns:
        """Columns with their user or persisted visibility."""
        return self._columns

    @property
    def pending_toggles(self) -> dict[str, bool]:
        return dict(self._deferred_toggles)

    def columns(self) -> tuple[ColumnConfig, ...]:
        """Columns with the visibility that should be rendered."""
        return apply_visibility_override(
            self._columns,
            self._filtered_fields,
            show_attributes=self.show_attributes,
            filtered_only=self.show_only_filtered_attributes,
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def enter_selection_mode(self) -> None:
        self.selection.enter()

    def toggle_selection(self, element: str) -> bool:
        return self.selection.toggle(element)

    def select_all(self) -> None:
        """Select every element visible after filtering and sorting."""
        self.selection.select_all(row.element for row in self.visible_results())

    def deselect_all(self) -> None:
        self.selection.deselect_all()

    def exit_selection_mode(self) -> None:
        self.selection.exit()

    def bulk_delete(self, on_delete: Callable[[list[str]], Any]) -> list[str]:
        """Hand the selection to ``on_delete`` and clear it."""
        if not self.selection.count:
            return []
        elements = self.selection.take_for_bulk_delete()
        on_delete(elements)
        return elements

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def visible_results(self) -> list[ResultRow]:
        return result_view.apply(self._results, self.filter_text, self.sort_state)

    def filtered_field_values(self) -> dict[str, dict[str, str]]:
        """Display values of filter-referenced fields while the override is active."""
        if not self.override_active:
            return {}
        return compute_filtered_field_values(
            self._results, self.cache.parsed, self._filtered_fields
        )

    def rows(self) -> list[RenderRow]:
        """Visible results with resolved attribute cells."""
        shown = [
            column.name
            for column in self.columns()
            if not column.is_system and column.visible
        ]
        overlay = self.filtered_field_values()

        rendered = []
        for row in self.visible_results():
            parsed = self.cache.parsed(row.element)
            if row.element in overlay:
                cells = {name: overlay[row.element].get(name, "") for name in shown}
            else:
                attributes = parsed or {}
                cells = {name: format_attribute_value(attributes.get(name)) for name in shown}
            rendered.append(
                RenderRow(
                    element=row.element,
                    score=row.score,
                    selected=self.selection.is_selected(row.element),
                    cells=cells,
                    has_attributes=parsed is not None,
                )
            )
        return rendered

    @property
    def is_loading_attributes(self) -> bool:
        return self.cache.is_loading

    @property
    def diagnostics(self) -> list[AttributeDiagnostic]:
        """Recoverable failures for the current dataset, oldest first."""
        return sorted(self._diagnostics + self.cache.diagnostics, key=lambda d: d.timestamp)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _visibility(self, name: str, default: bool) -> bool:
        try:
            return self.preferences.get(name, default)
        except Exception as e:
            logger.warning(f"Could not read visibility preference for '{name}': {e}")
            return default

    def _persist_visibility(self, name: str, origin: ColumnOrigin, visible: bool) -> None:
        try:
            self.preferences.set(visibility_key(name, origin), visible)
        except Exception as e:
            logger.warning(f"Could not persist visibility preference for '{name}': {e}")
            self._record(DiagnosticKind.PREFERENCES, str(e))

    def _save_display_flags(self) -> None:
        try:
            display = self.preferences.load_display_settings()
            display.show_attributes = self.show_attributes
            display.show_only_filtered_attributes = self.show_only_filtered_attributes
            self.preferences.save_display_settings(display)
        except Exception as e:
            logger.warning(f"Could not persist display settings: {e}")
            self._record(DiagnosticKind.PREFERENCES, str(e))

    def _rederive_schema(self) -> None:
        before = len(self._columns)
        self._columns = derive_columns(self._columns, self.cache.field_names(), self._visibility)
        if len(self._columns) != before:
            logger.debug(f"Column schema grew from {before} to {len(self._columns)} columns")

    def _transition(self, change: Callable[[], None]) -> None:
        """Apply a settings change and flush deferred toggles if the override ended."""
        was_active = self.override_active
        change()
        if was_active and not self.override_active:
            self._flush_deferred_toggles()

    def _flush_deferred_toggles(self, persist_only: bool = False) -> None:
        for name, visible in self._deferred_toggles.items():
            if not persist_only:
                self._columns = set_column_visibility(self._columns, name, visible, "attribute")
            self._persist_visibility(name, "attribute", visible)
        self._deferred_toggles.clear()

    def _record(self, kind: DiagnosticKind, message: str) -> None:
        self._diagnostics.append(AttributeDiagnostic(kind=kind, message=message))
