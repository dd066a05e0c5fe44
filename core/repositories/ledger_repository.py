from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from core.entities.transaction import Transaction
from core.entities.deposit import Deposit, AutoDeposit


class LedgerRepository(ABC):
    """Every balance mutation goes through here and commits together with its record."""

    @abstractmethod
    def debit_and_record(self, user_id: int, type: str, amount_cents: int, commission_cents: int,
                         details: Dict[str, Any], idempotency_key: Optional[str] = None) -> Transaction:...

    @abstractmethod
    def find_by_idempotency_key(self, user_id: int, idempotency_key: str) -> Optional[Transaction]:...

    @abstractmethod
    def get_transaction(self, tx_id: int) -> Optional[Transaction]:...

    @abstractmethod
    def list_transactions(self, user_id: int) -> List[Transaction]:...

    @abstractmethod
    def resolve_transaction(self, tx_id: int, status: str, refund: bool) -> Transaction:...

    @abstractmethod
    def count_approved_deposits(self, user_id: int, deposit_type: str) -> int:...

    @abstractmethod
    def create_deposit(self, user_id: int, deposit_type: str, amount_cents: int, amount_to_add_cents: int,
                       bank_id: Optional[int], receipt_url: Optional[str]) -> Deposit:...

    @abstractmethod
    def get_deposit(self, deposit_id: int) -> Optional[Deposit]:...

    @abstractmethod
    def list_deposits(self, user_id: int) -> List[Deposit]:...

    @abstractmethod
    def approve_deposit(self, deposit_id: int) -> Deposit:...

    @abstractmethod
    def reject_deposit(self, deposit_id: int) -> Deposit:...

    @abstractmethod
    def stage_autodeposit(self, amount_cents: int, last_3_digits: str) -> AutoDeposit:...

    @abstractmethod
    def claim_autodeposit(self, user_id: int, amount_cents: int, last_3_digits: str,
                          amount_to_add_cents: int, bank_id: Optional[int]) -> Optional[Deposit]:...
