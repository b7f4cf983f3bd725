"""Price history and trend analysis for the stocks in a game."""

import math
from typing import Dict, List, Optional

import pandas as pd

from config import INDICATORS
from market import Stock


class PriceHistory:
    """Values of every stock, recorded once per turn."""

    def __init__(self):
        self.turns: List[int] = []
        self.values: Dict[int, Dict[int, int]] = {}  # turn -> stock id -> value

    def record(self, turn: int, stocks: List[Stock]):
        if turn not in self.values:
            self.turns.append(turn)
        self.values[turn] = {s.id: s.value for s in stocks}

    def __len__(self):
        return len(self.turns)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per turn, one column per stock id.

        Stocks added mid-game have no values for earlier turns.
        """
        df = pd.DataFrame.from_dict(self.values, orient='index')
        df.index.name = 'turn'
        return df.sort_index()


def calculate_sma(series: pd.Series, period: int) -> pd.Series:
    """Calculate Simple Moving Average."""
    return series.rolling(window=period).mean()


def calculate_rsi(series: pd.Series, period: int = 14) -> pd.Series:
    """Calculate Relative Strength Index."""
    delta = series.diff()
    gain = (delta.where(delta > 0, 0)).rolling(window=period).mean()
    loss = (-delta.where(delta < 0, 0)).rolling(window=period).mean()

    rs = gain / loss
    rsi = 100 - (100 / (1 + rs))
    return rsi


def _last(series: pd.Series) -> Optional[float]:
    if series.empty:
        return None
    value = series.iloc[-1]
    if pd.isna(value) or math.isinf(value):
        return None
    return round(float(value), 2)


def get_stock_analysis(history: PriceHistory, stock: Stock) -> Optional[Dict]:
    """Get trend indicators for a single stock."""
    df = history.to_dataframe()
    if df.empty or stock.id not in df.columns:
        return None

    values = df[stock.id].dropna()
    if values.empty:
        return None

    current = int(values.iloc[-1])
    previous = int(values.iloc[-2]) if len(values) >= 2 else current
    change = current - previous
    change_pct = (change / previous) * 100 if previous > 0 else 0.0

    analysis = {
        "id": stock.id,
        "name": stock.name,
        "value": current,
        "change": change,
        "change_pct": round(change_pct, 2),
        "high": int(values.max()),
        "low": int(values.min()),
        "momentum": stock.momentum,
        "turns_recorded": len(values),
    }
    for period in INDICATORS['sma_periods']:
        analysis[f"sma_{period}"] = _last(calculate_sma(values, period))
    analysis["rsi"] = _last(calculate_rsi(values, INDICATORS['rsi_period']))
    return analysis


def get_market_summary(history: PriceHistory, stocks: List[Stock], top: int = 3) -> Dict:
    """Get a summary of how the market moved last turn."""
    analyses = []
    for stock in stocks:
        analysis = get_stock_analysis(history, stock)
        if analysis:
            analyses.append(analysis)

    if not analyses:
        return {"error": "No price history yet"}

    avg_change_pct = sum(a['change_pct'] for a in analyses) / len(analyses)
    gainers = sorted(analyses, key=lambda x: x['change_pct'], reverse=True)[:top]
    losers = sorted(analyses, key=lambda x: x['change_pct'])[:top]

    return {
        "stocks_analyzed": len(analyses),
        "avg_change_pct": round(avg_change_pct, 2),
        "top_gainers": gainers,
        "top_losers": losers,
        "all_stocks": analyses,
    }
