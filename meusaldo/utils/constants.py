APP_NAME = "Meu Saldo"
DB_FILE = "meusaldo.db"
DEFAULT_USER = "default"


def db_file_for_user(user_id: str) -> str:
    return f"meusaldo_{user_id}.db"


DATE_FORMAT = "%Y-%m-%d"

DEBIT = "DEBIT"
CREDIT = "CREDIT"
TRANSACTION_TYPES = (DEBIT, CREDIT)

UNCATEGORIZED_LABEL = "Sem Categoria"
RECENT_TRANSACTIONS_LIMIT = 5

# Upper bound on ids bound into a single DELETE ... IN (...) statement
DELETE_CHUNK_SIZE = 500

DEFAULT_REMINDER_DAYS_BEFORE = 1
DEFAULT_REMINDER_TEMPLATE = (
    "Olá {nome}! Lembrete: seu débito no valor de {valor} vence em breve.\n\n"
    "Segue chave PIX para pagamento: {pix}"
)
PIX_KEY_FALLBACK = "Não informada"
TEST_MESSAGE_TEXT = "Olá! Esta é uma mensagem de teste do seu App Financeiro."
MESSAGE_TIMEOUT_SECONDS = 15

EXPORT_HEADERS = [
    "ID", "Descrição", "Valor", "Data", "Vencimento", "Tipo",
    "Categoria", "Subcategoria", "Conta", "Pago", "Recorrente", "Parcelas",
]
EXPORT_FILE_PREFIX = "meu_saldo_backup_"
