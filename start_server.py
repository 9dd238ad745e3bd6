#!/usr/bin/env python3

import uvicorn

from inventory_app.config import settings

if __name__ == "__main__":
    print(f"Starting Inventory Reservation API on {settings.host}:{settings.port}")
    print(f"Database: {settings.database_url}")
    print(f"Reservation expiry: {settings.reservation_expiry_minutes} minutes")

    uvicorn.run(
        "inventory_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else settings.log_level.lower()
    )
