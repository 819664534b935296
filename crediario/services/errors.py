from __future__ import annotations


class CreditSaleError(ValueError):
    """base dos erros de domínio do crediário."""


class ValidationError(CreditSaleError):
    pass


class NotFoundError(CreditSaleError):
    pass


class OverpaymentError(CreditSaleError):
    def __init__(self, amount, remaining):
        super().__init__(
            f"O valor do pagamento ({amount}) não pode ser maior que o valor restante ({remaining})."
        )
        self.amount = amount
        self.remaining = remaining


class AlreadySettledError(CreditSaleError):
    pass


class ConcurrentUpdateError(CreditSaleError):
    """outra transação alterou a venda entre a leitura e a gravação."""
