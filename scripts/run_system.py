"""
Run Complete Signal Engine
Single command to start everything (mock market feed)
Run: python scripts/run_system.py [--symbols BTCUSDT ETHUSDT] [--no-publish]
"""

from signal_engine.orchestrator.main import run

if __name__ == "__main__":
    print("Starting Market Signal Engine...")
    print("Press Ctrl+C to stop")
    print()

    run()
