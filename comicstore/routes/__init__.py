from comicstore.routes import (
    addresses, auth, cancellations, cart, catalog, orders, payments, statistics, users,
)

ROUTERS = [
    auth.router,
    users.router,
    catalog.router,
    addresses.router,
    cart.router,
    orders.router,
    cancellations.router,
    statistics.router,
    payments.router,
]
