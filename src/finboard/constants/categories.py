"""
Category names and keyword tables shared by the store, the interpreter and the CLI.
Names are the Portuguese labels stored in transactions.
"""

from ..models.asset import AssetType

# Transaction Categories - Income
INCOME_CATEGORIES = [
    "Salário",
    "Freelance",
    "Investimentos",
    "Receita",
    "Outros",
]

# Transaction Categories - Expenses
EXPENSE_CATEGORIES = [
    "Moradia",
    "Alimentação",
    "Transporte",
    "Saúde",
    "Educação",
    "Lazer",
    "Compras",
    "Tecnologia",
    "Parcelamento",
    "Outros",
]

INCOME_CATEGORY = "Receita"
DEFAULT_EXPENSE_CATEGORY = "Outros"

# Checked in order; the first category with a keyword contained in the
# description wins. Keywords are compared without accents.
EXPENSE_KEYWORDS = {
    "Alimentação": ["supermercado", "mercado", "restaurante", "lanche", "comida", "almoço", "jantar", "café", "padaria", "ifood"],
    "Transporte": ["uber", "taxi", "táxi", "ônibus", "metro", "metrô", "gasolina", "combustível", "estacionamento"],
    "Moradia": ["aluguel", "luz", "água", "gás", "internet", "condomínio"],
    "Saúde": ["farmácia", "médico", "consulta", "exame", "dentista", "hospital"],
    "Educação": ["curso", "livro", "escola", "faculdade", "material"],
    "Lazer": ["cinema", "teatro", "show", "viagem", "parque", "diversão"],
    "Compras": ["roupa", "sapato", "presente", "eletrônico", "casa"],
    "Tecnologia": ["celular", "computador", "software", "app", "streaming"],
}

ASSET_TYPE_LABELS = {
    AssetType.FIXED_INCOME: "Renda Fixa",
    AssetType.VARIABLE_INCOME: "Renda Variável",
    AssetType.CRYPTO: "Criptomoedas",
    AssetType.FUND: "Fundos",
}


def get_expense_categories():
    """Return list of expense categories."""
    return EXPENSE_CATEGORIES.copy()


def get_income_categories():
    """Return list of income categories."""
    return INCOME_CATEGORIES.copy()
