from __future__ import annotations

class AnalysisError(ValueError):
    """Input rejected before any indicator is computed."""

    code = "analysis_error"

class InsufficientDataError(AnalysisError):
    code = "insufficient_data"

    def __init__(self, required: int, got: int, detail: str = ""):
        self.required = int(required)
        self.got = int(got)
        msg = f"Insufficient historical data. Minimum {self.required} days required (got {self.got})."
        if detail:
            msg = f"{msg} {detail}"
        super().__init__(msg)

class InvalidCandleError(AnalysisError):
    code = "invalid_candle"

    def __init__(self, index: int, reason: str):
        self.index = int(index)
        self.reason = reason
        super().__init__(f"candle[{self.index}]: {reason}")

class MarketDataError(RuntimeError):
    """Raised by the market-data adapters (HTTP failures, empty payloads, unknown symbols)."""

    code = "market_data_error"
