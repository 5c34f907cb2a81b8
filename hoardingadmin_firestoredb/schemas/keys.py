from dataclasses import dataclass


@dataclass
class FireStoreKeys:
    userId = "userId"
    hoardingId = "hoardingId"
    status = "status"
    paymentStatus = "paymentStatus"
    role = "role"
    active = "active"
    read = "read"
    order = "order"
    createdAt = "createdAt"
    updatedAt = "updatedAt"
    DESCENDING = "DESCENDING"
    ASCENDING = "ASCENDING"
