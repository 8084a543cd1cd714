"""
CEX (Centralized Exchange) Module

Exchange integrations live under exchanges.integrations.<exchange>.
Currently supported:
- CoinEx Futures: WebSocket session manager (connection, auth, subscriptions)
"""
