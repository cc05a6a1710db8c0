"""REST paths exposed by the IShare API."""

# Auth
REGISTER = "/api/auth/register"
LOGIN = "/api/auth/login"
LOGOUT = "/api/auth/logout"
CURRENT_USER = "/api/auth/me"
REFRESH_TOKEN = "/api/auth/refresh-token"
VERIFY_EMAIL = "/api/auth/verify-email"
FORGOT_PASSWORD = "/api/auth/forgot-password"
RESET_PASSWORD = "/api/auth/reset-password"

# Users
USER_PROFILE = "/api/users/profile"
UPDATE_PROFILE = "/api/users/profile"
SAVED_PLACES = "/api/users/saved-places"
USER_PAYMENT_METHODS = "/api/users/payment-methods"

# Rides
CREATE_RIDE = "/api/rides"
USER_RIDES = "/api/rides"
SCHEDULE_RIDE = "/api/rides/schedule"
RECURRING_RIDES = "/api/rides/recurring"

# Drivers
NEARBY_DRIVERS = "/api/drivers/nearby"
DRIVER_LOCATION = "/api/drivers/location"
DRIVER_STATUS = "/api/drivers/status"
DRIVER_STATS = "/api/drivers/stats"

# Messages
SEND_MESSAGE = "/api/messages"
UNREAD_COUNT = "/api/messages/unread"

# Notifications
GET_NOTIFICATIONS = "/api/notifications"
MARK_ALL_NOTIFICATIONS_READ = "/api/notifications/read-all"
CLEAR_NOTIFICATIONS = "/api/notifications"
NOTIFICATION_UNREAD_COUNT = "/api/notifications/unread/count"
REGISTER_DEVICE_TOKEN = "/api/notifications/device-token"

# Payments
PAYMENT_INTENT = "/api/payments/create-intent"
PAYMENT_METHODS = "/api/payments/methods"
PAYMENT_HISTORY = "/api/payments/history"

# Ratings
CREATE_RATING = "/api/ratings"


def user_details(user_id: str) -> str:
    return f"/api/users/{user_id}"


def ride_details(ride_id: str) -> str:
    return f"/api/rides/{ride_id}"


def update_ride_status(ride_id: str) -> str:
    return f"/api/rides/{ride_id}/status"


def conversation(user_id: str) -> str:
    return f"/api/messages/conversation/{user_id}"


def ride_messages(ride_id: str) -> str:
    return f"/api/messages/ride/{ride_id}"


def mark_message_read(message_id: str) -> str:
    return f"/api/messages/{message_id}/read"


def mark_notification_read(notification_id: str) -> str:
    return f"/api/notifications/{notification_id}/read"


def delete_notification(notification_id: str) -> str:
    return f"/api/notifications/{notification_id}"


def user_ratings(user_id: str) -> str:
    return f"/api/ratings/user/{user_id}"
