"""
Sea lice forecast engine.

Layer Structure:
- Domain: entities, forecasting math and the interfaces to records and stores
- Application: the historical data reader, use cases and DTOs
- Infrastructure: MongoDB access, the daily scheduler and the alert hook
- Presentation: FastAPI routers for operators
- Shared: logging, enums and secret loading
- Main: settings, dependency container and entry points
"""
