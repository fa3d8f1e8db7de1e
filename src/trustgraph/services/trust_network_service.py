from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from trustgraph.config import settings
from trustgraph.core.errors import EmptyGraphError, SolverError, TrustGraphError
from trustgraph.core.log import get_logger
from trustgraph.core.models import AnyEdge, DerivationResult, StoredEdge, SyncResult
from trustgraph.core.normalize import normalize_address
from trustgraph.ports.account_source_port import AccountSourcePort
from trustgraph.ports.edge_store_port import EdgeStorePort
from trustgraph.ports.metrics_port import MetricsPort
from trustgraph.ports.path_solver_port import PathSolverPort
from trustgraph.services.edge_deriver import EdgeDeriver
from trustgraph.services.edge_sync import EdgeSynchronizer
from trustgraph.services.extractor import extract_registry

logger = get_logger(__name__)

ProgressFn = Callable[[str, Dict[str, Any]], None]


def _noop_progress(event: str, data: Dict[str, Any]) -> None:
    return None


def graph_nodes(edges: Iterable[AnyEdge]) -> List[str]:
    """Distinct addresses used as from, to or token, in first-seen order."""
    nodes: Dict[str, None] = {}
    for e in edges:
        nodes.setdefault(e.from_address)
        nodes.setdefault(e.to_address)
        nodes.setdefault(e.token)
    return list(nodes)


class TrustNetworkService:
    """
    Keeps the stored transfer graph in line with the trust network.

    - Derivation: source accounts -> registry -> capacity-weighted edges
    - Sync: minimal add/update/remove against the edge store, one transaction
    - Serving: stored edges + node set for the external path solver
    """

    def __init__(
        self,
        source: AccountSourcePort,
        store: EdgeStorePort,
        metrics: Optional[MetricsPort] = None,
        solver: Optional[PathSolverPort] = None,
        deriver: Optional[EdgeDeriver] = None,
    ) -> None:
        self.source = source
        self.store = store
        self.metrics = metrics
        self.solver = solver
        self.deriver = deriver or EdgeDeriver()
        self.synchronizer = EdgeSynchronizer(store)

    def derive(self, on_progress: Optional[ProgressFn] = None) -> DerivationResult:
        progress = on_progress or _noop_progress

        progress("fetch", {})
        records = list(self.source.iter_accounts())
        progress("fetch_done", {"count": len(records)})

        registry = extract_registry(records)
        edges = self.deriver.derive(registry)
        progress("derived", {"edges": len(edges), **registry.statistics.as_dict()})

        return DerivationResult(statistics=registry.statistics, edges=edges)

    def sync(self, on_progress: Optional[ProgressFn] = None) -> Tuple[DerivationResult, SyncResult]:
        progress = on_progress or _noop_progress

        derivation = self.derive(on_progress=progress)
        result = self.synchronizer.sync(derivation.edges)
        progress("synced", result.as_dict())

        return derivation, result

    def graph(self) -> Tuple[List[str], List[StoredEdge]]:
        edges = self.store.list_edges()
        return graph_nodes(edges), edges

    def transfer_steps(self, from_address: str, to_address: str, value: int) -> Dict[str, Any]:
        if self.solver is None:
            raise SolverError("No path solver configured")

        sender = normalize_address(from_address)
        receiver = normalize_address(to_address)

        nodes, edges = self.graph()
        if not nodes:
            raise EmptyGraphError("Trust network does not contain any nodes")

        try:
            result = self.solver.find_transfer_steps(sender, receiver, int(value), nodes, edges)
        except TrustGraphError:
            raise
        except Exception as exc:
            raise SolverError(f"{exc.__class__.__name__}: {exc}") from exc

        steps = []
        for step in result.get("transferSteps") or []:
            step = dict(step)
            step["tokenOwnerAddress"] = step.pop("token", None)
            steps.append(step)

        logger.info("transfer_steps_computed", nodes=len(nodes), edges=len(edges), steps=len(steps))
        return {**result, "transferSteps": steps}

    # -------------------------
    # Metrics
    # -------------------------

    def set_transfer_metrics(self, payload: Dict[str, Any]) -> None:
        self._require_metrics().set_metrics(settings.METRICS_TRANSFERS, payload)

    def get_transfer_metrics(self) -> Optional[Dict[str, Any]]:
        return self._require_metrics().get_metrics(settings.METRICS_TRANSFERS)

    def _require_metrics(self) -> MetricsPort:
        if self.metrics is None:
            raise TrustGraphError("No metrics store configured")
        return self.metrics
