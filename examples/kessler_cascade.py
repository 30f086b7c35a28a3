"""orbcascade Kessler cascade: run the debris cascade on an asyncio loop."""

import asyncio
import logging

from orbcascade import CascadeSimulator, SimulationState


async def main() -> None:
    sim = CascadeSimulator(seed=42, speed=60)
    sim.start()
    try:
        while sim.state is SimulationState.RUNNING:
            await asyncio.sleep(1.0)
            snap = sim.snapshot()
            print(f"year {snap.simulated_years:6.1f}  objects {snap.population:4d}  collisions {snap.collision_count}")
    finally:
        sim.close()

    for sample in sim.history:
        print(f"{sample.year:4d}: {sample.count}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
