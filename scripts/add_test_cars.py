import asyncio
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timezone
from decimal import Decimal

from database.base import async_session_factory, init_db
from database.models.car import Car, CarStatus
from sqlalchemy import text


async def add_test_cars():
    """Добавить тестовые автомобили в базу данных"""
    await init_db()

    async with async_session_factory() as session:
        # Проверяем, есть ли уже автомобили
        existing_cars = await session.execute(text("SELECT COUNT(*) FROM cars"))
        count = existing_cars.scalar()

        if count > 0:
            print(f"В базе уже есть {count} автомобилей. Пропускаем добавление.")
            return

        cars_data = [
            {
                "name": "Toyota Vios 2022",
                "license_plate": "51A-123.45",
                "brand": "Toyota",
                "model": "Vios",
                "year": 2022,
                "type": "Sedan",
                "seats": 5,
                "fuel_type": "Petrol",
                "price_per_day": "500000",
                "description": "Экономичный седан для города"
            },
            {
                "name": "Honda CR-V 2023",
                "license_plate": "51A-678.90",
                "brand": "Honda",
                "model": "CR-V",
                "year": 2023,
                "type": "SUV",
                "seats": 7,
                "fuel_type": "Petrol",
                "price_per_day": "900000",
                "description": "Семейный кроссовер"
            },
            {
                "name": "Kia Morning 2021",
                "license_plate": "51B-246.80",
                "brand": "Kia",
                "model": "Morning",
                "year": 2021,
                "type": "Hatchback",
                "seats": 4,
                "fuel_type": "Petrol",
                "price_per_day": "400000",
                "description": None
            },
            {
                "name": "VinFast VF8 2024",
                "license_plate": "51K-135.79",
                "brand": "VinFast",
                "model": "VF8",
                "year": 2024,
                "type": "SUV",
                "seats": 5,
                "fuel_type": "Electric",
                "price_per_day": "1200000",
                "description": "Электромобиль с запасом хода 400 км"
            }
        ]

        now = datetime.now(timezone.utc)
        for car_data in cars_data:
            car = Car(
                name=car_data["name"],
                license_plate=car_data["license_plate"],
                brand=car_data["brand"],
                model=car_data["model"],
                year=car_data["year"],
                type=car_data["type"],
                seats=car_data["seats"],
                fuel_type=car_data["fuel_type"],
                price_per_day=Decimal(car_data["price_per_day"]),
                description=car_data["description"],
                status=CarStatus.AVAILABLE,
                created_at=now
            )
            session.add(car)

        await session.commit()
        print(f"✅ Добавлено {len(cars_data)} тестовых автомобилей")

        print("\n📋 Созданные автомобили:")
        for car_data in cars_data:
            print(f"🚗 {car_data['license_plate']} - {car_data['name']} ({car_data['price_per_day']}/день)")


if __name__ == "__main__":
    asyncio.run(add_test_cars())
