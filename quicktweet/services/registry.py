"""Wiring for the service objects shared by every request."""

from __future__ import annotations

from dataclasses import dataclass

from quicktweet.services.friend_service import FriendGraph
from quicktweet.services.ledger_service import AuthorizationLedger
from quicktweet.services.lifecycle_service import AccountLifecycle
from quicktweet.services.user_service import UserDirectory


@dataclass
class ServiceRegistry:
    ledger: AuthorizationLedger
    lifecycle: AccountLifecycle
    friends: FriendGraph
    directory: UserDirectory

    @classmethod
    def build(cls, ledger_id: int | None = None) -> "ServiceRegistry":
        ledger = AuthorizationLedger(ledger_id)
        return cls(
            ledger=ledger,
            lifecycle=AccountLifecycle(ledger),
            friends=FriendGraph(),
            directory=UserDirectory(),
        )

    def startup(self) -> None:
        self.ledger.bootstrap()
