"""Affiliate registry.

A referral code on a cart line is only honoured when it belongs to a
registered, active affiliate. Codes are checked before an order is committed
so an unknown code never reaches the commission ledger.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.commission.events import AffiliateRegistered
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.aggregate
class Affiliate:
    code = Identifier(identifier=True)
    name = String(required=True, max_length=255)
    is_active = Boolean(default=True)
    registered_at = DateTime()

    @classmethod
    def register(cls, code, name):
        code = (code or "").strip()
        if not code:
            raise ValidationError({"code": ["Affiliate code is required"]})

        now = datetime.now(UTC)
        affiliate = cls(code=code, name=name, is_active=True, registered_at=now)
        affiliate.raise_(AffiliateRegistered(code=code, name=name, registered_at=now))
        return affiliate

    def deactivate(self):
        self.is_active = False

    def to_dict(self) -> dict:
        return {
            "code": str(self.code),
            "name": self.name,
            "is_active": self.is_active,
            "registered_at": self.registered_at.isoformat() if self.registered_at else None,
        }


@storefront.command(part_of="Affiliate")
class RegisterAffiliate:
    code = Identifier(required=True)
    name = String(required=True, max_length=255)


@storefront.command_handler(part_of=Affiliate)
class RegisterAffiliateHandler:
    @handle(RegisterAffiliate)
    def register_affiliate(self, command):
        repo = current_domain.repository_for(Affiliate)
        try:
            repo.get(str(command.code))
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"code": [f"Affiliate code {command.code} is already registered"]})

        affiliate = Affiliate.register(code=command.code, name=command.name)
        repo.add(affiliate)
        logger.info("affiliate_registered", code=str(affiliate.code))
        return affiliate


def normalize_affiliate_code(code) -> str | None:
    """Trimmed code, or None when the line carries no referral."""
    code = (code or "").strip()
    return code or None


def ensure_known_affiliates(codes):
    """Raise ValidationError unless every code belongs to an active affiliate."""
    repo = current_domain.repository_for(Affiliate)
    referred = {normalize_affiliate_code(code) for code in codes} - {None}
    for code in sorted(referred):
        try:
            affiliate = repo.get(code)
        except ObjectNotFoundError:
            affiliate = None
        if affiliate is None or not affiliate.is_active:
            logger.info("affiliate_code_rejected", code=code)
            raise ValidationError(
                {"affiliate_id": [f"Invalid affiliate code {code}. Please check with your referrer."]}
            )
