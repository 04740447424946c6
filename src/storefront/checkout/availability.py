"""Advisory stock verdicts taken just before commit.

This check holds nothing. Stock verified here can still be gone by the time
the order is placed; the placement handler re-checks inside its own unit of
work and is the only authoritative gate.
"""

import structlog
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.gateway import CatalogueGateway, CatalogueUnavailableError, VariationSnapshot
from storefront.checkout.lines import AvailabilityReport, AvailabilityVerdict, ReconciledLine

logger = structlog.get_logger(__name__)


class AvailabilityChecker:
    def __init__(self, gateway: CatalogueGateway):
        self.gateway = gateway

    def check(self, lines: list[ReconciledLine]) -> AvailabilityReport:
        """Re-read current stock for every line.

        Lines that share a variation are checked against their summed
        quantity, as the commit does; each of them is flagged when the total
        cannot be supplied. A line without a variation, or whose variation
        cannot be read right now, is reported unavailable with stock 0.
        Unverified lines pass only when the fresh read succeeds.
        """
        requested: dict[str, int] = {}
        for line in lines:
            if line.variation_id:
                key = str(line.variation_id)
                requested[key] = requested.get(key, 0) + line.requested_quantity

        snapshots = {}
        verdicts = []
        for line in lines:
            if not line.variation_id:
                verdicts.append(self._unavailable(line))
                continue
            key = str(line.variation_id)
            if key not in snapshots:
                snapshots[key] = self._read(key)
            variation = snapshots[key]
            if variation is None:
                verdicts.append(self._unavailable(line))
                continue
            verdicts.append(
                AvailabilityVerdict(
                    variation_id=variation.id,
                    requested=line.requested_quantity,
                    current_stock=variation.quantity,
                    available=variation.quantity >= requested[key],
                    product_id=variation.product_id,
                    color=variation.color,
                    size=variation.size,
                )
            )

        report = AvailabilityReport(verdicts=tuple(verdicts))
        if not report.all_available:
            logger.info(
                "availability_rejected",
                shortfalls=[verdict.to_dict() for verdict in report.shortfalls],
            )
        return report

    def _read(self, variation_id) -> VariationSnapshot | None:
        try:
            return self.gateway.get_variation(variation_id)
        except (ObjectNotFoundError, CatalogueUnavailableError) as exc:
            logger.warning("availability_read_failed", variation_id=str(variation_id), reason=str(exc))
            return None

    @staticmethod
    def _unavailable(line: ReconciledLine) -> AvailabilityVerdict:
        return AvailabilityVerdict(
            variation_id=line.variation_id,
            requested=line.requested_quantity,
            current_stock=0,
            available=False,
            product_id=line.product_id,
            color=line.color,
            size=line.size,
        )
