from .settlement import settle_balance, advance_due_date, split_total, covered_installments, to_naive_utc, utc_now

__all__ = ["settle_balance", "advance_due_date", "split_total", "covered_installments", "to_naive_utc", "utc_now"]
