from dataclasses import dataclass

ACCOUNT_TYPES = ("checking", "savings", "credit_card", "wallet")

ACCOUNT_TYPE_LABELS = {
    "checking": "Conta Corrente",
    "savings": "Poupança",
    "credit_card": "Cartão de Crédito",
    "wallet": "Carteira",
}


@dataclass
class Account:
    id: str
    name: str
    initial_balance: float = 0.0
    type: str = "checking"

    @property
    def type_label(self) -> str:
        return ACCOUNT_TYPE_LABELS.get(self.type, self.type)
