# Canonical photo slots captured for every vehicle
VEHICLE_PHOTO_SLOTS = (
    "front_left_side",
    "front_right_side",
    "rear_left_side",
    "rear_right_side",
    "front_view_grille",
    "rear_view_tailgate",
    "driver_side_profile",
    "passenger_side_profile",
    "dashboard",
    "instrument_cluster",
    "engine_bay",
    "gear_and_seats",
    "dashboard_closeup",
    "odometer",
    "chassis_number_plate",
    "chassis_imprint",
    "selfie_with_vehicle",
    "underbody",
    "tires_and_rims",
)
