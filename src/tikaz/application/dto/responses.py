from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class AddressResponse(BaseModel):
    street: str
    city: str
    postalCode: str
    zone: str


class CustomerResponse(BaseModel):
    name: str
    email: str
    phone: str
    address: AddressResponse


class RestaurantRefResponse(BaseModel):
    id: str
    name: str


class OrderItemResponse(BaseModel):
    name: str
    unitPrice: MoneyResponse
    quantity: int
    subtotal: MoneyResponse
    note: str | None = None


class TimelineEntryResponse(BaseModel):
    sequence: int
    status: str
    timestamp: datetime
    note: str | None = None


class OrderRatingResponse(BaseModel):
    score: int
    comment: str | None = None
    createdAt: datetime


class OrderResponse(BaseModel):
    orderId: str
    orderNumber: str
    customer: CustomerResponse
    restaurant: RestaurantRefResponse
    items: list[OrderItemResponse] = Field(default_factory=list)
    totalAmount: MoneyResponse
    deliveryFee: MoneyResponse
    finalAmount: MoneyResponse
    paymentMethod: str
    paymentStatus: str
    orderStatus: str
    specialInstructions: str | None = None
    estimatedDeliveryTime: datetime
    actualDeliveryTime: datetime | None = None
    timeline: list[TimelineEntryResponse] = Field(default_factory=list)
    rating: OrderRatingResponse | None = None
    createdAt: datetime


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class RestaurantContactResponse(BaseModel):
    phone: str
    email: str
    website: str | None = None


class OpeningHoursResponse(BaseModel):
    open: str
    close: str
    closed: bool


class RestaurantRatingResponse(BaseModel):
    average: float
    count: int


class RestaurantResponse(BaseModel):
    restaurantId: str
    name: str
    description: str
    cuisine: str
    imageUrl: str
    address: AddressResponse
    contact: RestaurantContactResponse
    operatingHours: dict[str, OpeningHoursResponse] = Field(default_factory=dict)
    deliveryZones: list[str] = Field(default_factory=list)
    deliveryFee: MoneyResponse
    minimumOrder: MoneyResponse
    rating: RestaurantRatingResponse
    status: str
    featured: bool
    tags: list[str] = Field(default_factory=list)
    isCurrentlyOpen: bool | None = None


class PaginationResponse(BaseModel):
    currentPage: int
    totalPages: int
    totalResults: int
    hasNextPage: bool
    hasPreviousPage: bool


class RestaurantListResponse(BaseModel):
    restaurants: list[RestaurantResponse] = Field(default_factory=list)
    pagination: PaginationResponse


class RestaurantSearchResponse(BaseModel):
    restaurants: list[RestaurantResponse] = Field(default_factory=list)
    count: int


class ZoneListResponse(BaseModel):
    zones: list[str] = Field(default_factory=list)


class CuisineListResponse(BaseModel):
    cuisines: list[str] = Field(default_factory=list)


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str | None = None
    price: MoneyResponse
    imageUrl: str | None = None
    isAvailable: bool
    spicy: bool
    vegetarian: bool
    vegan: bool
    allergens: list[str] = Field(default_factory=list)


class MenuCategoryResponse(BaseModel):
    category: str
    items: list[MenuItemResponse] = Field(default_factory=list)


class MenuResponse(BaseModel):
    restaurantId: str
    restaurantName: str
    menu: list[MenuCategoryResponse] = Field(default_factory=list)


class ContactReplyResponse(BaseModel):
    message: str
    respondedBy: str
    respondedAt: datetime


class ContactResponse(BaseModel):
    contactId: str
    name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    type: str
    priority: str
    status: str
    assignedTo: str | None = None
    response: ContactReplyResponse | None = None
    createdAt: datetime
    updatedAt: datetime


class ContactListResponse(BaseModel):
    contacts: list[ContactResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class ContactSummaryResponse(BaseModel):
    total: int
    new: int
    inProgress: int
    resolved: int
    closed: int


class ContactTypeCountResponse(BaseModel):
    type: str
    count: int


class ContactStatsResponse(BaseModel):
    summary: ContactSummaryResponse
    byType: list[ContactTypeCountResponse] = Field(default_factory=list)


class DashboardOrderCountsResponse(BaseModel):
    total: int
    today: int
    active: int
    delivered: int
    cancelled: int


class DashboardRevenueResponse(BaseModel):
    today: MoneyResponse
    total: MoneyResponse


class DashboardRestaurantCountsResponse(BaseModel):
    total: int
    active: int
    featured: int


class DashboardContactCountsResponse(BaseModel):
    total: int
    new: int
    pending: int


class RecentOrderResponse(BaseModel):
    orderId: str
    orderNumber: str
    customerName: str
    restaurantName: str
    finalAmount: MoneyResponse
    orderStatus: str
    createdAt: datetime


class DashboardStatsResponse(BaseModel):
    orders: DashboardOrderCountsResponse
    revenue: DashboardRevenueResponse
    restaurants: DashboardRestaurantCountsResponse
    contacts: DashboardContactCountsResponse
    recentOrders: list[RecentOrderResponse] = Field(default_factory=list)


class DailyRevenueResponse(BaseModel):
    day: str
    revenue: MoneyResponse
    orders: int


class RestaurantRevenueResponse(BaseModel):
    restaurantName: str
    revenue: MoneyResponse
    orders: int


class RevenueAnalyticsResponse(BaseModel):
    period: str
    dailyRevenue: list[DailyRevenueResponse] = Field(default_factory=list)
    topRestaurants: list[RestaurantRevenueResponse] = Field(default_factory=list)


class StatusCountResponse(BaseModel):
    status: str
    count: int


class HourCountResponse(BaseModel):
    hour: int
    count: int


class OrderAnalyticsResponse(BaseModel):
    period: str
    ordersByStatus: list[StatusCountResponse] = Field(default_factory=list)
    ordersByHour: list[HourCountResponse] = Field(default_factory=list)
    averageOrderValue: MoneyResponse
    totalOrders: int
