"""Stats orchestration: collect, derive, reduce, format."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..chains.evm import EvmClient
from ..config import AppConfig
from ..formatter import format_summary
from ..interfaces.chain import ChainClient
from ..metrics import derive_branch_metrics, reduce_protocol
from ..models import Deployment, ProtocolSummary, SnapshotReference
from ..protocols.liquity_v2 import collect_snapshot, load_deployment

logger = logging.getLogger(__name__)


async def fetch_summary(
    client: ChainClient,
    deployment: Deployment,
    reference: SnapshotReference = "latest",
) -> ProtocolSummary:
    """Collect one snapshot and reduce it to a ProtocolSummary."""
    total_supply, raw_branches = await collect_snapshot(client, deployment, reference)
    branches = [
        derive_branch_metrics(raw, deployment.sp_yield_split) for raw in raw_branches
    ]
    return reduce_protocol(total_supply, branches)


async def fetch_stats(
    client: ChainClient,
    deployment: Deployment,
    reference: SnapshotReference = "latest",
) -> dict[str, Any]:
    """Protocol stats record at ``reference``, all numbers as decimal strings.

    Any failing chain read fails the whole call; nothing partial is returned.
    """
    summary = await fetch_summary(client, deployment, reference)
    return format_summary(summary)


@dataclass(frozen=True)
class StatsResult:
    """A stats record and the snapshot reference it was read at."""

    block: SnapshotReference
    stats: dict[str, Any]


class StatsService:
    """Builds the chain client and deployment from config and takes snapshots."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._client: ChainClient = EvmClient(config.chain)
        self._deployment: Deployment = load_deployment(config.deployment_path)

    @property
    def deployment(self) -> Deployment:
        return self._deployment

    async def _resolve_reference(self, reference: SnapshotReference) -> SnapshotReference:
        """Pin "latest" to a concrete block number when configured to."""
        if (
            self._config.stats.pin_latest
            and isinstance(reference, str)
            and reference.strip().lower() == "latest"
        ):
            number = await self._client.block_number()
            logger.info("Pinned latest to block %d", number)
            return number
        return reference

    async def snapshot(self, reference: SnapshotReference | None = None) -> StatsResult:
        """Fetch the stats record at ``reference`` (config default if None)."""
        if reference is None:
            reference = self._config.stats.block
        block = await self._resolve_reference(reference)

        logger.info(
            "Fetching stats for %d branches at block %s",
            len(self._deployment.branches),
            block,
        )
        summary = await fetch_summary(self._client, self._deployment, block)

        symbols = [b.coll_symbol for b in summary.branches]
        if len(symbols) != len(set(symbols)):
            logger.warning("Duplicate collateral symbols, later branches win: %s", symbols)

        stats = format_summary(summary)

        logger.info(
            "Stats: BOLD supply: %s  Debt pending: %s  TVL: %s  Max SP APY: %s",
            stats["total_bold_supply"],
            stats["total_debt_pending"],
            stats["total_value_locked"],
            stats["max_sp_apy"],
        )
        return StatsResult(block=block, stats=stats)

    @staticmethod
    def write_output(result: StatsResult, path: str | Path) -> Path:
        """Write the stats record to ``path`` as indented JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(result.stats, indent=2) + "\n")
        logger.info("Stats written to %s", path)
        return path
