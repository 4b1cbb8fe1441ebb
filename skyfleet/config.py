from skyfleet.unit import Kilometer, Millisecond, Second

# Progress Clock
PROGRESS_TICK = Millisecond(500)
MIN_TRIP_DISTANCE = Kilometer(3)
TRIP_DURATION_MIN = Second(20)
TRIP_DURATION_SPAN = Second(20)

# Route geometry (degrees)
ROUTE_STEPS = 15
ROUTE_ARC = 0.002
BOUNDS_MIN_SPAN = 0.005

# Map viewport
DEFAULT_ZOOM = 12
ZOOM_INCREMENT = 0.5
INITIAL_ZOOM_OFFSET = 0.5

# Battery (percent)
DEFAULT_BATTERY = 100
LOW_BATTERY = 25
CRITICAL_BATTERY = 20
MID_BATTERY = 50
DRAIN_PER_KM = 3
DRAIN_MIN = 5
DRAIN_MAX = 20
KM_PER_DEGREE = 111

# Charging
CHARGE_DURATION = Second(5)
CHARGE_TICK = Millisecond(100)

# Driver ride offers
NOTIFICATION_DELAY = Second(5)
REJECT_DELAY = Second(2)
COOLDOWN_DELAY = Second(10)
DRIVER_DRONE_ID = "AUH-DR-011"

# Storage keys
BATTERY_LEVELS_KEY = "drone-deploy-battery-levels"
DRIVER_BATTERY_KEY = "drone-deploy-driver-battery"
COMPLETED_RIDES_KEY = "drone-deploy-driver-completed-rides"
