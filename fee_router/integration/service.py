"""
Fee router service: the imperative shell around the pure kernels.

Exposes the three caller-facing operations plus policy maintenance:
- `init_policy(args) -> policy_id`
- `init_honorary_position(policy_id, ...) -> honorary_position_id`
- `update_policy(policy_id, changes, caller=...) -> Policy`
- `crank_distribute(policy_id, pool, page_cursor, is_last_page, investor_page) -> CrankOutcome`

Every operation runs inside `_atomic()`: the record store and the token ledger
are snapshotted first and restored on any exception, so a failed call leaves
no claim, no transfer and no record change behind. Hosting environments are
expected to serialize calls per pool; the service itself takes no locks.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from ..core.binder import bind_position
from ..core.distribution import (
    CrankParams,
    DayPhase,
    PageEntry,
    PayoutKind,
    Policy,
    Progress,
    Transfer,
    crank_or_raise,
    day_phase,
)
from ..core.errors import ConstraintViolation, InsufficientFunds, InvalidInvestorPage
from ..core.events import (
    Event,
    HonoraryPositionInitialized,
    PolicyInitialized,
    PolicyUpdated,
)
from ..core.policy import (
    PolicyInit,
    PolicyUpdate,
    TokenAccountInfo,
    init_policy,
    policy_config_hash,
    require_id,
    update_policy,
)
from ..state.canonical import canonical_id
from ..state.identity import (
    honorary_position_address,
    policy_address,
    position_owner_address,
    progress_address,
    vault_authority_address,
)
from ..state.ledger import TokenLedger
from ..state.records import RecordStore
from .adapters import EligibilityReader, FeeClaimAdapter
from .config import FeeRouterConfig


logger = logging.getLogger(__name__)

EventSink = Callable[[Event], None]


class InvestorRef(NamedTuple):
    """One page entry as supplied by the (untrusted) caller."""

    destination: str
    eligibility_ref: str


@dataclass(frozen=True)
class CrankOutcome:
    events: Tuple[Event, ...]
    progress: Progress
    transfers: Tuple[Transfer, ...]
    rolled_over: bool = False


class FeeRouterService:
    def __init__(
        self,
        *,
        ledger: TokenLedger,
        claim_adapter: FeeClaimAdapter,
        eligibility: EligibilityReader,
        config: FeeRouterConfig = FeeRouterConfig(),
        store: Optional[RecordStore] = None,
        clock: Callable[[], float] = time.time,
        event_sink: Optional[EventSink] = None,
    ) -> None:
        self.ledger = ledger
        self.claim_adapter = claim_adapter
        self.eligibility = eligibility
        self.config = config
        self.store = store if store is not None else RecordStore()
        self._clock = clock
        self._event_sink = event_sink
        self._rules = config.crank_rules()

    # -- derived identities --------------------------------------------------

    def policy_id_for(self, pool: str) -> str:
        return policy_address(self.config.program_id, pool)

    def progress_id_for(self, pool: str) -> str:
        return progress_address(self.config.program_id, pool)

    def vault_authority_for(self, policy_id: str) -> str:
        return vault_authority_address(self.config.program_id, policy_id)

    def honorary_position_id_for(self, policy_id: str) -> str:
        return honorary_position_address(self.config.program_id, policy_id)

    def position_owner_for(self, policy_id: str) -> str:
        return position_owner_address(self.config.program_id, policy_id)

    # -- reads ---------------------------------------------------------------

    def get_policy(self, policy_id: str) -> Optional[Policy]:
        return self.store.get_policy(require_id(policy_id, name="policy_id"))

    def get_progress(self, pool: str) -> Optional[Progress]:
        return self.store.get_progress(self.progress_id_for(require_id(pool, name="pool")))

    def day_phase(self, pool: str) -> DayPhase:
        return day_phase(self.get_progress(pool))

    # -- plumbing ------------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        ledger_snap = self.ledger.snapshot()
        store_snap = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.ledger.restore(ledger_snap)
            self.store.restore(store_snap)
            raise

    def _emit(self, events: Sequence[Event]) -> None:
        if self._event_sink is None:
            return
        for event in events:
            self._event_sink(event)

    def _account_info(self, account_id: str) -> Optional[TokenAccountInfo]:
        acct = self.ledger.get(account_id)
        if acct is None:
            return None
        return TokenAccountInfo(owner=acct.owner, mint=acct.mint)

    def _require_policy(self, policy_id: str) -> Policy:
        policy = self.store.get_policy(policy_id)
        if policy is None or not policy.initialized:
            raise ConstraintViolation(f"no initialized policy {policy_id}")
        return policy

    # -- configuration -------------------------------------------------------

    def init_policy(self, args: PolicyInit) -> str:
        """Create the Policy for `args.pool`. Returns the policy id."""
        pool = require_id(args.pool, name="pool")
        policy_id = self.policy_id_for(pool)
        with self._atomic():
            policy = init_policy(
                self.store.get_policy(policy_id),
                args,
                vault_authority=self.vault_authority_for(policy_id),
                treasury=self._account_info(require_id(args.treasury_destination, name="treasury_destination")),
                creator=self._account_info(require_id(args.creator_destination, name="creator_destination")),
            )
            self.store.put_policy(policy_id, policy)
        event = PolicyInitialized(policy=policy_id, config_hash=policy_config_hash(policy))
        logger.info(
            "policy initialized: policy=%s pool=%s share_bps=%d y0_total=%d cap=%d min_payout=%d",
            policy_id, pool, policy.investor_fee_share_bps, policy.y0_total,
            policy.daily_cap_quote, policy.min_payout_lamports,
        )
        self._emit([event])
        return policy_id

    def update_policy(self, policy_id: str, changes: PolicyUpdate, *, caller: str) -> Policy:
        policy_id = require_id(policy_id, name="policy_id")
        with self._atomic():
            current = self._require_policy(policy_id)
            creator = None
            if changes.creator_destination is not None:
                creator = self._account_info(require_id(changes.creator_destination, name="creator_destination"))
            updated = update_policy(current, changes, caller=caller, creator=creator)
            self.store.put_policy(policy_id, updated)
        logger.info("policy updated: policy=%s", policy_id)
        self._emit([PolicyUpdated(policy=policy_id, config_hash=policy_config_hash(updated))])
        return updated

    def init_honorary_position(
        self,
        policy_id: str,
        *,
        caller: str,
        pool: str,
        quote_mint: str,
        external_position: str,
    ) -> str:
        """Bind `external_position` to this policy. Returns the honorary position id."""
        policy_id = require_id(policy_id, name="policy_id")
        position = require_id(external_position, name="external_position")
        position_id = self.honorary_position_id_for(policy_id)
        owner = self.position_owner_for(policy_id)
        with self._atomic():
            policy = self._require_policy(policy_id)
            record = bind_position(
                policy,
                caller=caller,
                pool=pool,
                quote_mint=quote_mint,
                external_position=position,
                owner=owner,
                existing=self.store.get_position(position_id),
                bound_elsewhere=self.store.policy_for_position(position) is not None,
                quote_only=self.claim_adapter.is_quote_only(policy.pool, position, policy.quote_mint),
            )
            self.store.put_position(position_id, policy_id, record)
        logger.info("honorary position bound: policy=%s position=%s owner=%s", policy_id, position, owner)
        self._emit([HonoraryPositionInitialized(pool=record.pool, position=record.position, owner=record.owner)])
        return position_id

    # -- crank ---------------------------------------------------------------

    def _resolve_page(self, investor_page: Sequence[Tuple[str, str]]) -> Tuple[PageEntry, ...]:
        entries: List[PageEntry] = []
        for i, item in enumerate(investor_page):
            try:
                destination, reference = item
                destination = canonical_id(destination, name=f"investor_page[{i}].destination")
                reference = canonical_id(reference, name=f"investor_page[{i}].eligibility_ref")
            except (TypeError, ValueError) as exc:
                raise InvalidInvestorPage(str(exc)) from exc
            weight = self.eligibility.locked_amount(reference)
            entries.append(PageEntry(destination=destination, eligibility_ref=reference, weight=weight))
        return tuple(entries)

    def _execute_transfers(self, policy: Policy, policy_id: str, transfers: Sequence[Transfer]) -> None:
        # Only destinations that actually receive quote must be quote accounts.
        for t in transfers:
            if t.kind is not PayoutKind.INVESTOR:
                continue
            acct = self.ledger.get(t.destination)
            if acct is None:
                raise ConstraintViolation(f"investor destination {t.destination} does not exist")
            if acct.mint != policy.quote_mint:
                raise ConstraintViolation(f"investor destination {t.destination} is not a quote account")
        total = sum(t.amount for t in transfers)
        treasury_balance = self.ledger.balance(policy.treasury_destination)
        if total > treasury_balance:
            raise InsufficientFunds(f"treasury holds {treasury_balance}, crank needs {total}")
        authority = self.vault_authority_for(policy_id)
        for t in transfers:
            self.ledger.transfer(authority, policy.treasury_destination, t.destination, t.amount)

    def crank_distribute(
        self,
        policy_id: str,
        pool: str,
        page_cursor: int,
        is_last_page: bool,
        investor_page: Sequence[Tuple[str, str]] = (),
        *,
        now: Optional[int] = None,
    ) -> CrankOutcome:
        """
        Permissionless crank: claim, pay one page of investors, optionally close the day.

        Raises the typed `FeeRouterError` on rejection; state is unchanged then.
        """
        ts = int(self._clock()) if now is None else now
        policy_id = require_id(policy_id, name="policy_id")
        try:
            with self._atomic():
                policy = self._require_policy(policy_id)
                if require_id(pool, name="pool") != policy.pool:
                    raise ConstraintViolation("pool does not match policy")
                position = self.store.get_position(self.honorary_position_id_for(policy_id))
                if position is None:
                    raise ConstraintViolation("no honorary position bound to policy")

                entries = self._resolve_page(investor_page)
                progress_id = self.progress_id_for(policy.pool)
                previous = self.store.get_progress(progress_id)
                claim = self.claim_adapter.claim(position.position, policy.treasury_destination)
                result = crank_or_raise(
                    policy,
                    previous,
                    CrankParams(
                        now=ts,
                        page_cursor=page_cursor,
                        is_last_page=is_last_page,
                        investors=entries,
                        claim=claim,
                    ),
                    self._rules,
                )
                assert result.progress is not None
                self._execute_transfers(policy, policy_id, result.transfers)
                self.store.put_progress(progress_id, result.progress)
        except Exception as exc:
            logger.warning(
                "crank rejected: policy=%s cursor=%r last=%s error=%s",
                policy_id, page_cursor, is_last_page, getattr(exc, "code", type(exc).__name__),
            )
            raise

        progress = result.progress
        if result.rolled_over and previous is not None:
            logger.info(
                "day rolled over: policy=%s day=%d previous_day=%d",
                policy_id, progress.current_day, previous.current_day,
            )
        if result.stale_close_event is not None:
            logger.warning(
                "open day closed on rollover: policy=%s day=%d remainder=%d",
                policy_id, result.stale_close_event.day, result.stale_close_event.remainder,
            )
        for alloc in result.allocations:
            logger.debug(
                "allocation: day=%d destination=%s weight=%d share=%d paid=%s",
                progress.current_day, alloc.destination, alloc.weight, alloc.share, alloc.paid,
            )
        logger.info(
            "page committed: policy=%s day=%d cursor=%d investors=%d paid=%d claimed=%d carry=%d",
            policy_id, progress.current_day, page_cursor, len(entries),
            result.paid_total, progress.claimed_quote_today, result.page_event.carry_after,
        )
        if result.close_event is not None:
            logger.info(
                "day closed: policy=%s day=%d remainder=%d distributed=%d",
                policy_id, result.close_event.day, result.close_event.remainder,
                progress.distributed_quote_today,
            )
        self._emit(result.events)
        return CrankOutcome(
            events=result.events,
            progress=progress,
            transfers=result.transfers,
            rolled_over=result.rolled_over,
        )
