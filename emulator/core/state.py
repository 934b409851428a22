import os

from emulator.core.reconciler import Reconciler
from emulator.core.store import Store

APP_VERSION = os.getenv("APP_VERSION", "1.0.0-emulator")

store = Store()
reconciler = Reconciler(store, loop_secs=float(os.getenv("EMULATOR_TICK_SECS", "1")))
