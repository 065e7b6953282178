"""
Entry Store: the in-memory entries and exchange rates of one scenario.

The store is the only owner of BudgetEntry / ExchangeRate records for the active
scenario. Records are immutable, so callers receive values, never shared state;
edits come back as whole records through upsert().

Core invariant: at most one record per business key
    entry: (company, category, concept, month, year, version_id)
    rate:  (company, month, year, version_id)

Read computations (consolidation, projection, grids) work on snapshot(), an
immutable copy taken under the store lock, so a single computation never sees a
write that lands halfway through it.
"""
import logging
import threading
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, Iterator, List, Tuple

from groupbudget.domain.budget_entry import BudgetEntry
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.domain.exchange_rate import ExchangeRate
from groupbudget.domain.taxonomy import BudgetConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryBatch:
    """A set of entry updates handed to the store (and to persistence) in one call."""
    entries: Tuple[BudgetEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BudgetEntry]:
        return iter(self.entries)


class _ScenarioLookup:
    """
    Lazy-default lookups shared by the live store and its snapshots.

    Subclasses provide _entries / _rates dicts keyed by business key.
    """

    version_id: str
    year: int
    config: BudgetConfig
    reporting_currency: str

    def _entry_key(self, company: str, category: str, concept: str, month: int) -> tuple:
        return (company, category, concept, month, self.year, self.version_id)

    def _rate_key(self, company: str, month: int) -> tuple:
        return (company, month, self.year, self.version_id)

    def get_entry(self, company: str, category: str, concept: str, month: int) -> BudgetEntry:
        """
        Stored entry for the key, or a fresh zero-valued entry (not stored).

        Raises:
            BudgetValidationError: only for a structurally invalid key (month, category type)
        """
        existing = self._entries.get(self._entry_key(company, category, concept, month))
        if existing is not None:
            return existing
        return BudgetEntry(
            company=company,
            category=category,
            concept=concept,
            month=month,
            year=self.year,
            version_id=self.version_id,
        )

    def get_rate(self, company: str, month: int) -> ExchangeRate:
        """
        Stored rate for (company, month), or the default:
        1 when the company already reports in the reporting currency, 0 ("unset") otherwise.
        """
        existing = self._rates.get(self._rate_key(company, month))
        if existing is not None:
            return existing
        currency = self.config.currency_of(company) or self.reporting_currency
        default = 1.0 if currency == self.reporting_currency else 0.0
        return ExchangeRate(
            company=company,
            month=month,
            year=self.year,
            version_id=self.version_id,
            plan_rate=default,
            real_rate=default,
        )

    def has_entry(self, company: str, category: str, concept: str, month: int) -> bool:
        return self._entry_key(company, category, concept, month) in self._entries

    def entries(self) -> List[BudgetEntry]:
        return list(self._entries.values())

    def rates(self) -> List[ExchangeRate]:
        return list(self._rates.values())


class StoreSnapshot(_ScenarioLookup):
    """Immutable point-in-time view of an EntryStore."""

    def __init__(self, version_id: str, year: int, config: BudgetConfig, reporting_currency: str,
                 entries: dict, rates: dict):
        self.version_id = version_id
        self.year = year
        self.config = config
        self.reporting_currency = reporting_currency
        self._entries = MappingProxyType(dict(entries))
        self._rates = MappingProxyType(dict(rates))


class EntryStore(_ScenarioLookup):

    def __init__(
        self,
        version_id: str,
        config: BudgetConfig,
        year: int = 2026,
        reporting_currency: str = "USD",
        entries: Iterable[BudgetEntry] = (),
        rates: Iterable[ExchangeRate] = (),
    ):
        self.version_id = version_id
        self.config = config
        self.year = year
        self.reporting_currency = reporting_currency
        self._entries: dict = {}
        self._rates: dict = {}
        self._lock = threading.RLock()
        for e in entries:
            self.upsert_entry(e)
        for r in rates:
            self.upsert_rate(r)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, company: str, category: str, concept: str, month: int) -> BudgetEntry:
        with self._lock:
            return super().get_entry(company, category, concept, month)

    def get_rate(self, company: str, month: int) -> ExchangeRate:
        with self._lock:
            return super().get_rate(company, month)

    def entries(self) -> List[BudgetEntry]:
        with self._lock:
            return super().entries()

    def rates(self) -> List[ExchangeRate]:
        with self._lock:
            return super().rates()

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                self.version_id, self.year, self.config, self.reporting_currency,
                self._entries, self._rates,
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _check_scope(self, version_id: str, year: int) -> None:
        if version_id != self.version_id:
            raise BudgetValidationError(
                f"Record belongs to version {version_id!r}, store holds {self.version_id!r}"
            )
        if year != self.year:
            raise BudgetValidationError(f"Record belongs to year {year}, store holds {self.year}")

    def upsert(self, record):
        """Replace the record with the same business key, or insert it."""
        if isinstance(record, BudgetEntry):
            return self.upsert_entry(record)
        if isinstance(record, ExchangeRate):
            return self.upsert_rate(record)
        raise TypeError(f"Cannot store {type(record).__name__}")

    def upsert_entry(self, entry: BudgetEntry) -> BudgetEntry:
        self._check_scope(entry.version_id, entry.year)
        with self._lock:
            existing = self._entries.get(entry.key)
            # keep the storage id of the record being replaced
            if existing is not None and entry.id is None and existing.id is not None:
                entry = replace(entry, id=existing.id)
            self._entries[entry.key] = entry
        return entry

    def upsert_rate(self, rate: ExchangeRate) -> ExchangeRate:
        self._check_scope(rate.version_id, rate.year)
        with self._lock:
            existing = self._rates.get(rate.key)
            if existing is not None and rate.id is None and existing.id is not None:
                rate = replace(rate, id=existing.id)
            self._rates[rate.key] = rate
        return rate

    def apply_batch(self, batch: EntryBatch) -> List[BudgetEntry]:
        """Apply every update of the batch under a single lock acquisition."""
        for entry in batch:
            self._check_scope(entry.version_id, entry.year)
        with self._lock:
            return [self.upsert_entry(e) for e in batch]

    # ------------------------------------------------------------------
    # Bulk maintenance (company / concept removed or renamed)
    # ------------------------------------------------------------------

    def remove_company(self, company: str) -> int:
        """Delete every entry and rate of the company. Returns the number of records removed."""
        with self._lock:
            entry_keys = [k for k, e in self._entries.items() if e.company == company]
            rate_keys = [k for k, r in self._rates.items() if r.company == company]
            for k in entry_keys:
                del self._entries[k]
            for k in rate_keys:
                del self._rates[k]
        logger.info("Removed company %s: %d entries, %d rates", company, len(entry_keys), len(rate_keys))
        return len(entry_keys) + len(rate_keys)

    def remove_concept(self, category: str, concept: str) -> int:
        with self._lock:
            keys = [
                k for k, e in self._entries.items()
                if e.category == category and e.concept == concept
            ]
            for k in keys:
                del self._entries[k]
        logger.info("Removed concept %s/%s: %d entries", category, concept, len(keys))
        return len(keys)

    def rename_company(self, old_name: str, new_name: str) -> int:
        with self._lock:
            if any(e.company == new_name for e in self._entries.values()) or any(
                r.company == new_name for r in self._rates.values()
            ):
                raise BudgetValidationError(f"Company {new_name!r} already has budget data")
            moved_entries = [e for e in self._entries.values() if e.company == old_name]
            moved_rates = [r for r in self._rates.values() if r.company == old_name]
            for e in moved_entries:
                del self._entries[e.key]
            for r in moved_rates:
                del self._rates[r.key]
            for e in moved_entries:
                renamed = replace(e, company=new_name)
                self._entries[renamed.key] = renamed
            for r in moved_rates:
                renamed = replace(r, company=new_name)
                self._rates[renamed.key] = renamed
        return len(moved_entries) + len(moved_rates)

    def rename_concept(self, category: str, old_name: str, new_name: str) -> int:
        with self._lock:
            if any(e.category == category and e.concept == new_name for e in self._entries.values()):
                raise BudgetValidationError(f"Concept {category}/{new_name} already has budget data")
            moved = [
                e for e in self._entries.values()
                if e.category == category and e.concept == old_name
            ]
            for e in moved:
                del self._entries[e.key]
            for e in moved:
                renamed = replace(e, concept=new_name)
                self._entries[renamed.key] = renamed
        return len(moved)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
