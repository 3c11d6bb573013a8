from dataclasses import dataclass


@dataclass
class Category:
    id: str
    name: str
    type: str           # 'DEBIT' | 'CREDIT'


@dataclass
class Subcategory:
    id: str
    name: str
    category_id: str
