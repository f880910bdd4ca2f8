import json

from marketplace.models import Order, OrderItem, Seller, SellerOrder, SellerPayout


def item_to_dict(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "product_image": item.product_image,
        "price": item.price,
        "quantity": item.quantity,
        "line_total": item.line_total,
    }


def shipping_address(order: Order):
    if not order.shipping_address:
        return None
    try:
        return json.loads(order.shipping_address)
    except ValueError:
        # legacy rows hold a plain text address
        return order.shipping_address


def seller_order_to_dict(seller_order: SellerOrder, include_items: bool = True) -> dict:
    data = {
        "id": seller_order.id,
        "order_id": seller_order.order_id,
        "seller_id": seller_order.seller_id,
        "shop_name": seller_order.seller.shop_name if seller_order.seller else None,
        "subtotal": seller_order.subtotal,
        "status": seller_order.status,
        "tracking_number": seller_order.tracking_number,
        "shipped_at": seller_order.shipped_at,
        "delivered_at": seller_order.delivered_at,
        "created_at": seller_order.created_at,
    }
    if include_items:
        data["items"] = [item_to_dict(i) for i in seller_order.items]
    return data


def order_to_dict(order: Order, include_receipt: bool = False) -> dict:
    data = {
        "order_id": order.id,
        "request_id": order.request_id,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "total_amount": order.total_amount,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "shipping_address": shipping_address(order),
        "has_receipt": bool(order.receipt_image),
        "created_at": order.created_at,
        "seller_orders": [seller_order_to_dict(so) for so in order.seller_orders],
    }
    if include_receipt:
        data["receipt_image"] = order.receipt_image
    return data


def seller_to_dict(seller: Seller) -> dict:
    return {
        "id": seller.id,
        "user_id": seller.user_id,
        "shop_name": seller.shop_name,
        "shop_description": seller.shop_description,
        "email": seller.email,
        "status": seller.status,
        "rating": seller.rating,
        "total_sales": seller.total_sales,
        "bank_name": seller.bank_name,
        "account_number": seller.account_number,
        "account_holder_name": seller.account_holder_name,
        "has_bank_details": seller.has_bank_details,
        "created_at": seller.created_at,
    }


def payout_to_dict(payout: SellerPayout, seller: Seller = None) -> dict:
    data = {
        "id": payout.id,
        "seller_id": payout.seller_id,
        "seller_order_id": payout.seller_order_id,
        "amount": payout.amount,
        "commission_rate": payout.commission_rate,
        "commission_amount": payout.commission_amount,
        "net_amount": payout.net_amount,
        "status": payout.status,
        "payment_method": payout.payment_method,
        "transaction_reference": payout.transaction_reference,
        "paid_at": payout.paid_at,
    }
    if seller is not None:
        data["shop_name"] = seller.shop_name
        data["bank_name"] = seller.bank_name
        data["account_number"] = seller.account_number
    return data
