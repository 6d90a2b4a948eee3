from shopmaster.routers import addresses, admin, cart, catalog, coupons, orders, wishlist

all_routers = [
    catalog.router,
    cart.router,
    wishlist.router,
    orders.router,
    coupons.router,
    addresses.router,
    admin.router,
]
