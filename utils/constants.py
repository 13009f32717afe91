"""Shared constants: column names, labels, palettes."""

# Trajectory data (long format)
SUBJECT_COL = "subject_id"
TIME_COL = "time_index"
VALUE_COL = "value"
CLUSTER_COL = "cluster_id"

TRAJECTORY_LABELS = {
    SUBJECT_COL: "Subject",
    TIME_COL: "Days of sleep deprivation",
    VALUE_COL: "Reaction time (ms)",
    CLUSTER_COL: "Cluster",
    "intercept": "Baseline reaction time (intercept, ms)",
    "slope": "Change per day (slope, ms/day)",
}

CLUSTER_COLORS = ["#E63946", "#2A9D8F", "#264653", "#F4A261", "#7209B7", "#FB8500", "#2E86C1", "#8D99AE"]

# Listings data
LISTING_COLUMNS = [
    "id", "name", "neighbourhood_group", "neighbourhood", "latitude", "longitude",
    "room_type", "price", "minimum_nights", "number_of_reviews",
    "reviews_per_month", "availability_365",
]

LISTING_NUMERIC_COLS = [
    "latitude", "longitude", "price", "minimum_nights", "number_of_reviews",
    "reviews_per_month", "availability_365",
]

LISTING_FEATURE_COLS = ["price", "minimum_nights", "number_of_reviews", "reviews_per_month", "availability_365"]

LISTING_LABELS = {
    "price": "Nightly price ($)",
    "minimum_nights": "Minimum nights",
    "number_of_reviews": "Number of reviews",
    "reviews_per_month": "Reviews per month",
    "availability_365": "Days available per year",
    "neighbourhood_group": "Borough",
    "room_type": "Room type",
}

ROOM_TYPE_COLORS = {
    "Entire home/apt": "#264653",
    "Private room": "#2A9D8F",
    "Shared room": "#F4A261",
    "Hotel room": "#E63946",
}

ROOM_TYPES = list(ROOM_TYPE_COLORS.keys())

NEIGHBOURHOOD_GROUPS = {
    # name: (lat, lon) centre used by the simulator
    "Manhattan": (40.7831, -73.9712),
    "Brooklyn": (40.6782, -73.9442),
    "Queens": (40.7282, -73.7949),
    "Bronx": (40.8448, -73.8648),
    "Staten Island": (40.5795, -74.1502),
}

# Lasso demo: predict price from the other numeric listing columns
LASSO_TARGET = "price"
LASSO_FEATURES = ["minimum_nights", "number_of_reviews", "reviews_per_month", "availability_365", "latitude", "longitude"]

PAGE_TITLES = {
    1: "Lasso Regression",
    2: "K-Means Clustering",
    3: "Clustering Trajectories",
    4: "Listings Dashboard",
}
