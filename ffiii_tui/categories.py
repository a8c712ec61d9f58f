"""Categories with what was spent and earned in them this period."""
from __future__ import annotations

from dataclasses import dataclass

from .account_list import TOTAL_NAME, EntityListModel, ListConfig, ListItem
from .commands import Emit, sequence
from .messages import CATEGORIES, CategoriesUpdated, Filter, RefreshCategories, RefreshCategoryInsights, View
from .models import Category
from .prompt import CANCEL, Continuation

# sort cycle: unsorted, by spent, by earned
SORT_NONE = 0
SORT_SPENT = -1
SORT_EARNED = 1


@dataclass(frozen=True)
class NewCategory:
    name: str


@dataclass(frozen=True)
class CreateCategory(Continuation):
    back: object

    def resolve(self, value: str):
        if value == CANCEL or not value.strip():
            return self.back
        return sequence(Emit(NewCategory(value.strip())), self.back)


@dataclass(frozen=True)
class CategoryItem(ListItem):
    spent: float = 0.0
    earned: float = 0.0

    @property
    def description(self) -> str:
        parts = []
        if self.spent != 0:
            parts.append(f"Spent: {self.spent:.2f} {self.currency}")
        if self.earned != 0:
            parts.append(f"Earned: {self.earned:.2f} {self.currency}")
        if not parts:
            return "No transactions"
        return " | ".join(parts)


def category_item(category: Category, spent: float, earned: float, currency: str, total: bool = False) -> CategoryItem:
    return CategoryItem(category, "", earned - spent, currency, is_total=total, spent=spent, earned=earned)


def category_items(api, sort_state: int = SORT_NONE) -> list[CategoryItem]:
    currency = api.primary_currency().code
    items = [
        category_item(c, api.category_spent(c.id), api.category_earned(c.id), currency)
        for c in api.categories_list()
    ]
    if sort_state == SORT_SPENT:
        items = sorted((i for i in items if i.spent != 0), key=lambda i: i.spent, reverse=True)
    elif sort_state == SORT_EARNED:
        items = sorted((i for i in items if i.earned != 0), key=lambda i: i.earned, reverse=True)
    return items


def category_total(api, items: list[CategoryItem]) -> CategoryItem:
    spent = sum(i.spent for i in items)
    earned = sum(i.earned for i in items)
    return category_item(Category(id="", name=TOTAL_NAME), spent, earned, api.primary_currency().code, total=True)


def _create(api, msg: NewCategory) -> str:
    api.create_category(msg.name, "")
    return msg.name


CONFIG = ListConfig(
    resource=CATEGORIES,
    title="Categories",
    view=View.CATEGORIES,
    account_type="",
    refresh_msg=RefreshCategories,
    updated_msg=CategoriesUpdated,
    fetch=lambda api, _account_type: api.update_categories(),
    build_items=category_items,
    filter_for=lambda category: Filter(category=category),
    prompt="New Category(<name>): ",
    continuation=CreateCategory,
    create_msg=NewCategory,
    create=_create,
    created_label="Category",
    has_total=True,
    total_item=category_total,
    sort_states=(SORT_NONE, SORT_SPENT, SORT_EARNED),
    insights_msg=RefreshCategoryInsights,
    fetch_insights=lambda api: api.update_category_insights(),
)


def new_categories_model(api, layout=None) -> EntityListModel:
    return EntityListModel(api, CONFIG, layout)
