"""
Egg count arithmetic shared by the production model and the report
aggregators.

Two recording schemas coexist. The category schema records table, hatching,
cracked, jumbo and leaker eggs separately. The older schema records a total
with broken and damaged counts. A row uses the category schema as soon as any
category count is positive.

The functions accept any object exposing the count attributes (model
instances, report rows, plain namespaces); missing attributes count as zero.
"""

CATEGORY_FIELDS = ('table_eggs', 'hatching_eggs', 'cracked_eggs', 'jumbo_eggs', 'leaker_eggs')
SELLABLE_CATEGORIES = ('table_eggs', 'hatching_eggs', 'jumbo_eggs')
WASTE_CATEGORIES = ('cracked_eggs', 'leaker_eggs')


def _count(row, field):
    return getattr(row, field, 0) or 0


def uses_categories(row):
    return any(_count(row, field) > 0 for field in CATEGORY_FIELDS)


def total_eggs(row):
    if uses_categories(row):
        return sum(_count(row, field) for field in CATEGORY_FIELDS)
    return _count(row, 'total_eggs')


def sellable_eggs(row):
    if uses_categories(row):
        return sum(_count(row, field) for field in SELLABLE_CATEGORIES)
    legacy = _count(row, 'total_eggs') - _count(row, 'broken_eggs') - _count(row, 'damaged_eggs')
    return max(0, legacy)


def waste_eggs(row):
    if uses_categories(row):
        return sum(_count(row, field) for field in WASTE_CATEGORIES)
    return _count(row, 'broken_eggs') + _count(row, 'damaged_eggs')


def table_and_hatching(row):
    """Eggs counted by the dashboard production widgets."""
    if uses_categories(row):
        return _count(row, 'table_eggs') + _count(row, 'hatching_eggs')
    return sellable_eggs(row)
