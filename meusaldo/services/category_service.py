from meusaldo.database.category_dao import CategoryDAO
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.models.category import Category, Subcategory
from meusaldo.utils.constants import TRANSACTION_TYPES


class CategoryService:
    def __init__(self, category_dao: CategoryDAO, tx_dao: TransactionDAO):
        self._dao = category_dao
        self._tx_dao = tx_dao

    def get_all(self) -> list[Category]:
        return self._dao.get_all()

    def get_for_type(self, type_: str) -> list[Category]:
        return self._dao.get_by_type(type_)

    def create(self, name: str, type_: str) -> Category:
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        if type_ not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid type: {type_}")
        existing = [c.name.lower() for c in self._dao.get_all()]
        if name.lower() in existing:
            raise ValueError(f"A category named '{name}' already exists.")
        return self._dao.create(name, type_)

    def delete(self, category_id: str):
        if self._tx_dao.count_by_reference("category_id", category_id):
            raise ValueError("Cannot delete a category that is used by transactions.")
        if self._dao.get_subcategories_for(category_id):
            raise ValueError("Delete the category's subcategories first.")
        self._dao.delete(category_id)

    # ── Subcategories ────────────────────────────────────────────────────────

    def get_subcategories(self, category_id: str | None = None) -> list[Subcategory]:
        if category_id:
            return self._dao.get_subcategories_for(category_id)
        return self._dao.get_all_subcategories()

    def subcategory_type(self, subcategory: Subcategory) -> str | None:
        """A subcategory has no type of its own; it inherits its parent's."""
        parent = self._dao.get_by_id(subcategory.category_id)
        return parent.type if parent else None

    def create_subcategory(self, name: str, category_id: str) -> Subcategory:
        name = name.strip()
        if not name:
            raise ValueError("Subcategory name cannot be empty.")
        if not category_id or self._dao.get_by_id(category_id) is None:
            raise ValueError("Parent category not found.")
        return self._dao.create_subcategory(name, category_id)

    def delete_subcategory(self, subcategory_id: str):
        if self._tx_dao.count_by_reference("subcategory_id", subcategory_id):
            raise ValueError("Cannot delete a subcategory that is used by transactions.")
        self._dao.delete_subcategory(subcategory_id)
