class PersistenceError(Exception):
    """Raised when the backing store cannot be read or written."""


class CardNotFoundError(LookupError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card not found: {card_id}")


class DuplicateCardError(ValueError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card already exists: {card_id}")


class ContentNotFoundError(LookupError):
    """Unknown lesson or challenge id."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind.capitalize()} not found: {item_id}")
