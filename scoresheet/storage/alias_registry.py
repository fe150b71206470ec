from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from scoresheet.config.settings import settings
from scoresheet.models.alias import AliasMap, PromotionRecord, PromotionReport
from scoresheet.models.enums import Category, RegistrationResult
from scoresheet.normalization.text import canonicalize
from scoresheet.utils.misc_utils import natural_key, resolve_path, utc_now_iso

from .alias_store import AliasStore, load_alias_layer
from .errors import AuditLogError, StorageError
from .files import append_jsonl, atomic_write_json, exclusive_lock


def sort_layer(layer: AliasMap) -> AliasMap:
    """Categories and keys in natural order, for stable diffs."""
    return {
        cat: {raw: layer[cat][raw] for raw in sorted(layer[cat], key=natural_key)}
        for cat in sorted(layer)
    }


class AliasRegistry:
    """Operator-facing writes to the alias layers.

    ``register`` stages a mapping in the local layer; ``promote`` moves every
    staged mapping into the base layer and empties the local layer. Every
    attempt is logged, including no-ops and conflicts.
    """

    def __init__(
        self,
        base_file: Union[str, Path],
        local_file: Union[str, Path],
        registration_log: Union[str, Path],
        audit_log: Union[str, Path],
        store: Optional[AliasStore] = None,
    ):
        self.base_file = Path(base_file)
        self.local_file = Path(local_file)
        self.registration_log = Path(registration_log)
        self.audit_log = Path(audit_log)
        self.store = store

    @classmethod
    def from_settings(cls, store: Optional[AliasStore] = None) -> "AliasRegistry":
        return cls(
            resolve_path(settings.alias_base_file),
            resolve_path(settings.alias_local_file),
            resolve_path(settings.alias_reg_log),
            resolve_path(settings.alias_audit_log),
            store=store,
        )

    def register(
        self,
        category: Union[Category, str],
        raw: str,
        canonical: str,
        meta: Optional[Dict[str, Any]] = None,
        overwrite: bool = False,
    ) -> RegistrationResult:
        """Stages ``raw -> canonical`` in the local layer.

        Returns NOOP when the same mapping exists, CONFLICT when a different
        value exists and ``overwrite`` is false, otherwise CREATED/UPDATED.
        """
        cat = category.value if isinstance(category, Category) else str(category)
        key = canonicalize(raw)
        if not key:
            raise ValueError("Alias text must not be empty")

        with exclusive_lock(self.local_file):
            local = load_alias_layer(self.local_file)
            section = local.setdefault(cat, {})
            previous = section.get(key)

            if previous == canonical:
                result = RegistrationResult.NOOP
            elif previous is not None and not overwrite:
                result = RegistrationResult.CONFLICT
            else:
                section[key] = canonical
                atomic_write_json(self.local_file, sort_layer(local))
                result = (
                    RegistrationResult.UPDATED
                    if previous is not None
                    else RegistrationResult.CREATED
                )

        self._log(
            self.registration_log,
            {
                **(meta or {}),
                "ts": utc_now_iso(),
                "category": cat,
                "raw": key,
                "canonical": canonical,
                "result": result.value,
                "previous": previous,
            },
        )
        if result in (RegistrationResult.CREATED, RegistrationResult.UPDATED):
            self._invalidate()
            logger.info(f"[{result.value}] {cat}: {key} => {canonical}")
        else:
            logger.warning(
                f"[{result.value}] {cat}: {key} => {canonical} (stored: {previous})"
            )
        return result

    def promote(self) -> PromotionReport:
        """Moves every local mapping into the base layer, local winning.

        The base layer is written first; only after that succeeds are the
        audit lines appended and the local layer emptied. A failed base write
        leaves both layers as they were.
        """
        with exclusive_lock(self.base_file), exclusive_lock(self.local_file):
            local = load_alias_layer(self.local_file)
            if not any(local.values()):
                logger.info("Nothing to promote: local alias layer is empty.")
                return PromotionReport()

            base = load_alias_layer(self.base_file)
            report = PromotionReport()
            for cat in sorted(local):
                section = base.setdefault(cat, {})
                for raw in sorted(local[cat], key=natural_key):
                    canonical = local[cat][raw]
                    report.promoted.append(
                        PromotionRecord(
                            category=cat,
                            raw=raw,
                            canonical=canonical,
                            previous=section.get(raw),
                        )
                    )
                    section[raw] = canonical

            atomic_write_json(self.base_file, sort_layer(base))

            ts = utc_now_iso()
            for record in report.promoted:
                self._log(
                    self.audit_log,
                    {"ts": ts, "action": "promote", **record.model_dump()},
                )

            atomic_write_json(self.local_file, {})

        self._invalidate()
        logger.success(
            f"Promoted {len(report)} aliases in {len(report.categories)} categories."
        )
        return report

    def _log(self, path: Path, line: Dict[str, Any]) -> None:
        try:
            append_jsonl(path, line)
        except StorageError as e:
            raise AuditLogError(f"Cannot write alias log {path}: {e}") from e

    def _invalidate(self) -> None:
        if self.store is not None:
            self.store.invalidate_cache()
