"""macrostack – multi-source macro snapshot for the crypto dashboard.

Polls FRED (policy rate), Polymarket (rate-decision odds), FMP
(economic calendar) and Yahoo Finance (cross-asset levels), reconciles
the responses into one ``MacroSnapshot`` and writes it atomically to a
JSON file served statically to the display layer.

Every section degrades on its own: a failing provider falls back to a
lower-fidelity source or is recorded in ``errors``; it never aborts the
run.  Invoke once per schedule tick via ``python -m macrostack.run``.
"""
