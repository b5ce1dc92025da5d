from __future__ import annotations

from tikaz.application.dto.responses import (
    AddressResponse,
    CustomerResponse,
    MoneyResponse,
    OrderItemResponse,
    OrderRatingResponse,
    OrderResponse,
    RestaurantRefResponse,
    TimelineEntryResponse,
)
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import Order


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=money.amount_cents, currency=money.currency)


def to_order_response(order: Order) -> OrderResponse:
    address = order.customer.address
    rating = None
    if order.rating is not None:
        rating = OrderRatingResponse(
            score=order.rating.score,
            comment=order.rating.comment,
            createdAt=order.rating.created_at,
        )
    return OrderResponse(
        orderId=str(order.order_id),
        orderNumber=str(order.order_number),
        customer=CustomerResponse(
            name=order.customer.name,
            email=order.customer.email,
            phone=order.customer.phone,
            address=AddressResponse(
                street=address.street,
                city=address.city,
                postalCode=address.postal_code,
                zone=address.zone,
            ),
        ),
        restaurant=RestaurantRefResponse(
            id=str(order.restaurant.restaurant_id),
            name=order.restaurant.name,
        ),
        items=[
            OrderItemResponse(
                name=item.name,
                unitPrice=to_money_response(item.unit_price),
                quantity=item.quantity,
                subtotal=to_money_response(item.subtotal),
                note=item.note,
            )
            for item in order.items
        ],
        totalAmount=to_money_response(order.total_amount),
        deliveryFee=to_money_response(order.delivery_fee),
        finalAmount=to_money_response(order.final_amount),
        paymentMethod=order.payment_method.value,
        paymentStatus=order.payment_status.value,
        orderStatus=order.status.value,
        specialInstructions=order.special_instructions,
        estimatedDeliveryTime=order.estimated_delivery_at,
        actualDeliveryTime=order.actual_delivery_at,
        timeline=[
            TimelineEntryResponse(
                sequence=entry.sequence,
                status=entry.status.value,
                timestamp=entry.occurred_at,
                note=entry.note,
            )
            for entry in order.timeline
        ],
        rating=rating,
        createdAt=order.created_at,
    )
