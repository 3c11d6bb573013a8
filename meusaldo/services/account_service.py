from meusaldo.models.account import Account, ACCOUNT_TYPES
from meusaldo.database.account_dao import AccountDAO
from meusaldo.database.transaction_dao import TransactionDAO


class AccountService:
    def __init__(self, account_dao: AccountDAO, tx_dao: TransactionDAO):
        self._dao = account_dao
        self._tx_dao = tx_dao

    def get_all(self) -> list[Account]:
        return self._dao.get_all()

    def get_by_id(self, account_id: str) -> Account | None:
        return self._dao.get_by_id(account_id)

    def create(
        self,
        name: str,
        account_type: str = "checking",
        initial_balance: float = 0.0,
    ) -> Account:
        name = name.strip()
        if not name:
            raise ValueError("Account name cannot be empty.")
        self._validate_type(account_type)
        return self._dao.create(name, account_type, float(initial_balance))

    def update(
        self,
        account_id: str,
        name: str,
        account_type: str = "checking",
        initial_balance: float = 0.0,
    ) -> Account:
        name = name.strip()
        if not name:
            raise ValueError("Account name cannot be empty.")
        if self._dao.get_by_id(account_id) is None:
            raise ValueError("Account not found.")
        self._validate_type(account_type)
        return self._dao.update(account_id, name, account_type, float(initial_balance))

    def delete(self, account_id: str):
        if self._tx_dao.count_by_reference("account_id", account_id):
            raise ValueError(
                "Cannot delete an account with existing transactions. "
                "Remove all transactions first."
            )
        self._dao.delete(account_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _validate_type(account_type: str):
        if account_type not in ACCOUNT_TYPES:
            raise ValueError(
                f"Invalid account type '{account_type}'. "
                f"Must be one of: {', '.join(ACCOUNT_TYPES)}."
            )
