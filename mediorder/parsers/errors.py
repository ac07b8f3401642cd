class BmpError(ValueError):
    """Base error for payloads and plans that cannot be used safely."""


class MalformedPayload(BmpError):
    def __init__(self, message: str = "No <MP> element found in DataMatrix payload"):
        super().__init__(message)


class InvalidDocument(BmpError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid XML: {detail}")


class UnexpectedRoot(BmpError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Expected root element <MP>, got <{tag}>")


class PlanIdentityMismatch(BmpError):
    def __init__(self, expected: str, index: int, actual: str):
        self.expected = expected
        self.index = index
        self.actual = actual
        super().__init__(f'UUID mismatch: page 0 has "{expected}", page {index} has "{actual}"')


class EmptyMergeInput(BmpError):
    def __init__(self):
        super().__init__("Cannot merge empty list of BMP pages")
