"""
Moteur de calcul des totaux de facture.

Quatre montants liés : sous-total, remise (%), remise (montant) et total TTC.
Le caissier peut saisir n'importe lequel des trois derniers ; le moteur
recalcule les autres avec la même chaîne :

    sous-total -> remise -> base taxable -> taxe -> total

Aucune saisie n'est refusée : tout est ramené dans le domaine valide.
La validation bloquante (client, téléphone, lignes) se fait à l'envoi,
dans InvoiceService.
"""
from __future__ import annotations

from typing import Any, Iterable, List

from core.models.common import to_amount
from core.models.invoice import EditedField, InvoiceTotals, LineItem


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def tax_exclusive_price(price: float, tax_rate: float) -> float:
    """Prix catalogue TTC -> prix unitaire HT."""
    return to_amount(price) / (1.0 + tax_rate)


class InvoiceTotalsEngine:
    """
    Etat de calcul d'un brouillon de facture.

    Le taux de taxe est fixé à la construction (un taux par type de facture).
    Chaque setter recalcule tout de façon synchrone et renvoie les nouveaux
    totaux ; il n'y a jamais d'état intermédiaire visible.
    """

    def __init__(self, tax_rate: float, items: Iterable[LineItem] = ()) -> None:
        if not 0.0 <= tax_rate <= 1.0:
            raise ValueError(f"tax_rate must be within [0, 1], got {tax_rate}")
        self.tax_rate = float(tax_rate)
        self._items: List[LineItem] = []
        self._subtotal = 0.0
        self._discount_pct = 0.0
        self._last_edited: EditedField = "discount_percentage"
        self._totals = InvoiceTotals()
        self.set_line_items(items)

    # ---------------- lecture ---------------- #

    @property
    def items(self) -> List[LineItem]:
        return [it.model_copy() for it in self._items]

    @property
    def totals(self) -> InvoiceTotals:
        return self._totals

    @property
    def last_edited(self) -> EditedField:
        return self._last_edited

    # ---------------- points d'entrée ---------------- #

    def set_line_items(self, items: Iterable[LineItem]) -> InvoiceTotals:
        self._items = [it.model_copy() for it in items]
        self._subtotal = sum(it.quantity * it.unit_price for it in self._items)
        return self._recompute()

    def set_discount_percentage(self, pct: Any) -> InvoiceTotals:
        self._discount_pct = _clamp(to_amount(pct), 0.0, 100.0)
        self._last_edited = "discount_percentage"
        return self._recompute()

    def set_discount_amount(self, amount: Any) -> InvoiceTotals:
        if self._subtotal == 0:
            return self._totals
        amount = _clamp(to_amount(amount), 0.0, self._subtotal)
        self._discount_pct = _clamp(amount / self._subtotal * 100.0, 0.0, 100.0)
        self._last_edited = "discount_amount"
        return self._recompute()

    def set_grand_total(self, target: Any) -> InvoiceTotals:
        if self._subtotal == 0:
            return self._totals
        target = max(0.0, to_amount(target))
        # inversion de la chaîne ; un total infaisable donne le total faisable le plus proche
        pct = (1.0 - target / (self._subtotal * (1.0 + self.tax_rate))) * 100.0
        self._discount_pct = _clamp(pct, 0.0, 100.0)
        self._last_edited = "grand_total"
        return self._recompute()

    def apply_edit(self, field: EditedField, value: Any) -> InvoiceTotals:
        setters = {
            "discount_percentage": self.set_discount_percentage,
            "discount_amount": self.set_discount_amount,
            "grand_total": self.set_grand_total,
        }
        try:
            setter = setters[field]
        except KeyError:
            raise ValueError(f"Unknown edited field: {field!r}") from None
        return setter(value)

    # ---------------- calcul ---------------- #

    def _recompute(self) -> InvoiceTotals:
        subtotal = self._subtotal
        discount_amount = subtotal * self._discount_pct / 100.0
        post_discount = subtotal - discount_amount
        tax_amount = post_discount * self.tax_rate
        self._totals = InvoiceTotals(
            subtotal=subtotal,
            discount_percentage=self._discount_pct,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            grand_total=post_discount + tax_amount,
        )
        return self._totals
