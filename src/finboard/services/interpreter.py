"""Rule-based interpreter for free-text finance commands (Portuguese).

Text is run through an ordered list of ``(matcher, handler)`` rules; the
first matcher that fires hands its match to the handler, which returns a
typed intent. Intents are pure data: parsing never touches the store, only
:meth:`CommandInterpreter.process` applies them.
"""

from __future__ import annotations

import asyncio
import random
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from ..constants.categories import DEFAULT_EXPENSE_CATEGORY, EXPENSE_KEYWORDS, INCOME_CATEGORY
from ..errors import FinanceError
from ..logging_config import get_logger
from ..models.fields import parse_decimal
from ..models.transaction import TransactionType
from . import aggregation
from .store import FinanceStore

logger = get_logger("interpreter")


class ReplyCategory(str, Enum):
    TRANSACTION = "transaction"
    QUERY = "query"
    SUGGESTION = "suggestion"
    ANALYSIS = "analysis"


@dataclass(frozen=True, slots=True)
class Reply:
    text: str
    category: ReplyCategory


class QueryKind(str, Enum):
    BALANCE = "balance"
    SUMMARY = "summary"
    SPENDING = "spending"
    TIP = "tip"
    GOALS = "goals"


@dataclass(frozen=True, slots=True)
class MutationIntent:
    """Record a transaction dated today."""

    type: TransactionType
    amount: float
    description: str
    category: str


@dataclass(frozen=True, slots=True)
class QueryIntent:
    kind: QueryKind


@dataclass(frozen=True, slots=True)
class FallbackIntent:
    pass


Intent = Union[MutationIntent, QueryIntent, FallbackIntent]
Matcher = Callable[[str], Optional[re.Match]]
Handler = Callable[[re.Match], Optional[Intent]]

GREETING = (
    "👋 Olá! Sou seu assistente financeiro. Posso ajudar você a:\n\n"
    "• Registrar gastos e receitas\n"
    "• Consultar seu saldo e resumos\n"
    "• Analisar seus hábitos financeiros\n"
    "• Dar sugestões de economia\n\n"
    "Como posso ajudar hoje?"
)

TIPS = (
    "💡 **Dica de Economia:** Use a regra 50-30-20: 50% para necessidades, 30% desejos, 20% poupança.",
    "🎯 **Estratégia:** Defina metas específicas para seus objetivos financeiros - metas claras aumentam muito as chances de sucesso!",
    "📊 **Análise:** Revise seus gastos mensalmente e identifique padrões. Pequenos ajustes podem gerar grandes economias.",
    "🔄 **Hábito:** Automatize suas poupanças - configure transferências automáticas para sua reserva de emergência.",
    "📱 **Tecnologia:** Registre gastos em tempo real. O controle visual melhora muito a gestão!",
    "💰 **Investimento:** Antes de comprar algo, pergunte: \"Este valor investido poderia me render mais no futuro?\"",
)

HELP_MESSAGES = (
    "🤔 Não entendi completamente sua mensagem. Posso ajudar você a:\n\n"
    "• Registrar gastos (Ex: \"Gastei R$ 50 no supermercado\")\n"
    "• Consultar saldo (\"Qual meu saldo?\")\n"
    "• Ver resumos (\"Mostrar resumo\")\n"
    "• Dicas de economia (\"Dê uma dica\")\n\n"
    "Tente reformular sua pergunta!",
    "💭 Hmm, não consegui processar isso. Algumas sugestões:\n\n"
    "• \"Paguei R$ 100 na farmácia\"\n"
    "• \"Recebi R$ 500 de freelance\"\n"
    "• \"Como estão meus gastos?\"\n"
    "• \"Preciso de uma sugestão\"\n\n"
    "O que você gostaria de fazer?",
    "🔍 Não identifiquei um comando específico. Posso te ajudar com:\n\n"
    "✅ Registrar transações\n"
    "✅ Consultar informações financeiras\n"
    "✅ Análises e relatórios\n"
    "✅ Dicas personalizadas\n\n"
    "Como posso ser útil?",
)

_AMOUNT = r"(?:r\$\s?)?(?P<amount>\d{1,3}(?:\.\d{3})+(?:,\d{1,2})?|\d+(?:[.,]\d{1,2})?)"
_TAIL = r"\s*(?P<description>.*)"

EXPENSE_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE | re.DOTALL)
    for p in (
        rf"\bgastei\s+{_AMOUNT}{_TAIL}",
        rf"\bpaguei\s+{_AMOUNT}{_TAIL}",
        rf"\bcomprei\s*(?P<description>.*?)\s*por\s*{_AMOUNT}",
        rf"\bdespesa\s*de\s*{_AMOUNT}{_TAIL}",
    )
)

INCOME_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE | re.DOTALL)
    for p in (
        rf"\brecebi\s+{_AMOUNT}{_TAIL}",
        rf"\bganhei\s+{_AMOUNT}{_TAIL}",
        rf"\brenda\s*de\s*{_AMOUNT}{_TAIL}",
    )
)

# Compared against accent-stripped lowercase text.
QUERY_KEYWORDS: tuple[tuple[QueryKind, tuple[str, ...]], ...] = (
    (QueryKind.BALANCE, ("saldo", "quanto tenho")),
    (QueryKind.SUMMARY, ("resumo", "relatorio")),
    (QueryKind.SPENDING, ("gastos", "despesas")),
    (QueryKind.TIP, ("dica", "sugestao", "economia")),
    (QueryKind.GOALS, ("metas", "objetivos")),
)


def fold(text: str) -> str:
    """Lowercase ``text`` and strip accents so 'Relatório' matches 'relatorio'."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


_FOLDED_KEYWORDS = [
    (category, tuple(fold(k) for k in keywords)) for category, keywords in EXPENSE_KEYWORDS.items()
]


def categorize_expense(description: str) -> str:
    """First category whose keyword appears in ``description``; 'Outros' otherwise."""
    folded = fold(description)
    for category, keywords in _FOLDED_KEYWORDS:
        if any(keyword in folded for keyword in keywords):
            return category
    return DEFAULT_EXPENSE_CATEGORY


def format_brl(value: float) -> str:
    """Format as Brazilian reais, e.g. ``R$ 1.234,56``."""
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-R$ {text}" if value < 0 else f"R$ {text}"


def _clean_description(raw: str | None) -> str:
    return (raw or "").strip().rstrip(".!?").strip()


def _search_any(patterns: Sequence[re.Pattern]) -> Matcher:
    def matcher(text: str) -> Optional[re.Match]:
        for pattern in patterns:
            match = pattern.search(text)
            if match and _amount(match) > 0:
                return match
        return None

    return matcher


def _contains_any(keywords: Sequence[str]) -> Matcher:
    pattern = re.compile("|".join(re.escape(k) for k in keywords))

    def matcher(text: str) -> Optional[re.Match]:
        return pattern.search(fold(text))

    return matcher


def _amount(match: re.Match) -> float:
    try:
        return parse_decimal(match.group("amount"))
    except ValueError:
        return 0.0


def _expense_intent(match: re.Match) -> MutationIntent:
    description = _clean_description(match.group("description")) or "Gasto registrado"
    return MutationIntent(
        type=TransactionType.EXPENSE,
        amount=_amount(match),
        description=description,
        category=categorize_expense(description),
    )


def _income_intent(match: re.Match) -> MutationIntent:
    description = _clean_description(match.group("description")) or "Receita registrada"
    return MutationIntent(
        type=TransactionType.INCOME,
        amount=_amount(match),
        description=description,
        category=INCOME_CATEGORY,
    )


def _query(kind: QueryKind) -> Handler:
    return lambda _match: QueryIntent(kind)


DEFAULT_RULES: tuple[tuple[Matcher, Handler], ...] = (
    (_search_any(EXPENSE_PATTERNS), _expense_intent),
    (_search_any(INCOME_PATTERNS), _income_intent),
    *((_contains_any(keywords), _query(kind)) for kind, keywords in QUERY_KEYWORDS),
)


class CommandInterpreter:
    """Turns one message at a time into a store mutation or a summary reply."""

    def __init__(
        self,
        store: FinanceStore,
        *,
        rules: Sequence[tuple[Matcher, Handler]] = DEFAULT_RULES,
        rng: random.Random | None = None,
        response_delay: float = 0.0,
    ) -> None:
        self.store = store
        self.rules = tuple(rules)
        self._rng = rng or random.Random()
        self.response_delay = response_delay

    def parse(self, text: str) -> Intent:
        """Return the intent of the first matching rule. Never touches the store."""

        for matcher, handler in self.rules:
            match = matcher(text)
            if match is None:
                continue
            intent = handler(match)
            if intent is not None:
                return intent
        return FallbackIntent()

    def process(self, text: str) -> Reply:
        """Interpret ``text``, applying any transaction it describes."""

        if not isinstance(text, str) or not text.strip():
            return self._fallback()

        intent = self.parse(text)
        logger.debug("Parsed message", extra={"intent": type(intent).__name__})
        if isinstance(intent, MutationIntent):
            return self._record(intent)
        if isinstance(intent, QueryIntent):
            return self._answer(intent.kind)
        return self._fallback()

    async def process_async(self, text: str) -> Reply:
        """:meth:`process` after the configured response delay."""
        if self.response_delay > 0:
            await asyncio.sleep(self.response_delay)
        return self.process(text)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _record(self, intent: MutationIntent) -> Reply:
        try:
            self.store.add_transaction(
                {
                    "type": intent.type.value,
                    "amount": intent.amount,
                    "description": intent.description,
                    "category": intent.category,
                    "date": self.store.today(),
                }
            )
        except FinanceError as exc:
            logger.warning("Could not record transaction from message", extra={"error": str(exc)}, exc_info=True)
            return Reply(
                f"⚠️ Não consegui registrar essa transação: {exc}\n\nTente novamente em instantes.",
                ReplyCategory.SUGGESTION,
            )

        balance = format_brl(self.store.total_balance())
        amount = format_brl(intent.amount)
        if intent.type is TransactionType.EXPENSE:
            text = (
                "✅ Gasto registrado com sucesso!\n\n"
                f"💰 Valor: {amount}\n"
                f"📝 Descrição: {intent.description}\n"
                f"📁 Categoria: {intent.category}\n\n"
                f"Seu saldo atual é {balance}"
            )
        else:
            text = (
                "✅ Receita registrada com sucesso!\n\n"
                f"💰 Valor: {amount}\n"
                f"📝 Descrição: {intent.description}\n\n"
                f"Seu saldo atual é {balance}"
            )
        logger.info("Transaction recorded from message", extra={"type": intent.type.value, "amount": intent.amount})
        return Reply(text, ReplyCategory.TRANSACTION)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _answer(self, kind: QueryKind) -> Reply:
        handlers = {
            QueryKind.BALANCE: self._balance,
            QueryKind.SUMMARY: self._summary,
            QueryKind.SPENDING: self._spending,
            QueryKind.TIP: self._tip,
            QueryKind.GOALS: self._goals,
        }
        return handlers[kind]()

    def _balance(self) -> Reply:
        month = self.store.monthly_summary()
        return Reply(
            "💰 **Resumo Financeiro Atual**\n\n"
            f"• **Saldo total:** {format_brl(self.store.total_balance())}\n"
            f"• **Receitas este mês:** {format_brl(month.income)}\n"
            f"• **Gastos este mês:** {format_brl(month.expenses)}\n"
            f"• **Sobra mensal:** {format_brl(month.net)}",
            ReplyCategory.QUERY,
        )

    def _summary(self) -> Reply:
        goals = self.store.goals
        month = self.store.monthly_summary()
        trend = "📈 Positiva" if month.income > month.expenses else "📉 Atenção aos gastos"
        return Reply(
            "📊 **Resumo Completo**\n\n"
            "**Finanças:**\n"
            f"• {len(self.store.transactions)} transações registradas\n"
            f"• Saldo: {format_brl(self.store.total_balance())}\n"
            f"• Patrimônio em ativos: {format_brl(self.store.assets_value())}\n\n"
            "**Planejamento:**\n"
            f"• {len(goals)} metas ativas\n"
            f"• {len(aggregation.completed_goals(goals))} metas concluídas\n\n"
            f"**Tendência:** {trend}",
            ReplyCategory.ANALYSIS,
        )

    def _spending(self) -> Reply:
        today = self.store.today()
        breakdown = aggregation.expenses_by_category(self.store.transactions, as_of=today)
        lines = [f"• {category}: {format_brl(amount)}" for category, amount in aggregation.top_categories(breakdown, 5)]
        category_list = "\n".join(lines) if lines else "• Nenhum gasto registrado este mês"
        return Reply(
            f"💸 **Gastos deste mês: {format_brl(self.store.monthly_expenses(today))}**\n\n"
            f"**Top categorias:**\n{category_list}\n\n"
            "💡 **Dica:** Monitore as categorias com maiores gastos para identificar oportunidades de economia!",
            ReplyCategory.ANALYSIS,
        )

    def _tip(self) -> Reply:
        return Reply(self._rng.choice(TIPS), ReplyCategory.SUGGESTION)

    def _goals(self) -> Reply:
        goals = self.store.goals
        closing = (
            "✨ Continue firme! Metas claras são o primeiro passo para o sucesso financeiro."
            if goals
            else "💡 Que tal definir sua primeira meta? Comece com algo alcançável em 6 meses!"
        )
        return Reply(
            "🎯 **Suas Metas Financeiras**\n\n"
            f"• **Total de metas:** {len(goals)}\n"
            f"• **Metas concluídas:** {len(aggregation.completed_goals(goals))}\n"
            f"• **Valor total das metas:** {format_brl(aggregation.goals_target_total(goals))}\n\n"
            f"{closing}",
            ReplyCategory.ANALYSIS,
        )

    def _fallback(self) -> Reply:
        return Reply(self._rng.choice(HELP_MESSAGES), ReplyCategory.SUGGESTION)


__all__ = [
    "CommandInterpreter",
    "Reply",
    "ReplyCategory",
    "QueryKind",
    "MutationIntent",
    "QueryIntent",
    "FallbackIntent",
    "GREETING",
    "TIPS",
    "HELP_MESSAGES",
    "categorize_expense",
    "format_brl",
    "fold",
]
