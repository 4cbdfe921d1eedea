"""Per-layout CSV adapters producing :class:`~statement_ledger.models.RawRecord` rows."""
