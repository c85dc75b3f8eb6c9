# -*- coding: utf-8 -*-
"""
Purchase intake and the admin order workflow (approve / cancel).
"""
from flask import Blueprint, jsonify

from backoffice.middleware.auth import require_admin_token
from backoffice.schemas import parse_args, parse_body
from backoffice.schemas.requests import CreateOrderRequest, OrderIdRequest, OrderListQuery
from backoffice.services.licensing import (
    APPROVAL_ISSUED,
    APPROVAL_MAIL_FAILED,
    APPROVAL_NOT_PENDING,
    APPROVAL_ORDER_NOT_FOUND,
)
from backoffice.services.registry import get_services

orders_bp = Blueprint('orders', __name__, url_prefix='/api')


@orders_bp.route('/orders', methods=['POST'])
def create_order():
    """Record a pending purchase; an admin approves it once payment clears."""
    body = parse_body(CreateOrderRequest)
    order = get_services().licensing.create_order(body.email, body.order_code, body.amount)
    return jsonify({'success': True, 'order': order.to_dict()}), 201


@orders_bp.route('/admin/orders', methods=['GET'])
@require_admin_token
def list_orders():
    query = parse_args(OrderListQuery)
    orders = get_services().licensing.list_orders(status=query.status, limit=query.limit)
    return jsonify({'success': True, 'orders': [o.to_dict() for o in orders]})


@orders_bp.route('/admin/orders/approve', methods=['POST'])
@require_admin_token
def approve_order():
    """
    Issue the order's license key and email it to the buyer.

    Responses:
    - 200: key issued and delivered
    - 404: order_not_found
    - 409: not_pending (the existing issuedKey is returned)
    - 502: mail_failed (nothing was changed; the order is still pending)
    """
    body = parse_body(OrderIdRequest)
    result = get_services().licensing.approve_order(body.id)

    if result.outcome == APPROVAL_ISSUED:
        return jsonify({'success': True, 'issuedKey': result.issued_key, 'email': result.email})
    if result.outcome == APPROVAL_NOT_PENDING:
        return jsonify({
            'success': False,
            'error': 'not_pending',
            'message': 'Order is not pending',
            'issuedKey': result.issued_key,
        }), 409
    if result.outcome == APPROVAL_ORDER_NOT_FOUND:
        return jsonify({'success': False, 'error': 'order_not_found', 'message': 'Order not found'}), 404
    if result.outcome == APPROVAL_MAIL_FAILED:
        return jsonify({
            'success': False,
            'error': 'mail_failed',
            'message': 'License email could not be delivered; the order is still pending',
            'reason': result.reason,
        }), 502
    raise RuntimeError(f"Unexpected approval outcome: {result.outcome}")


@orders_bp.route('/admin/orders/cancel', methods=['POST'])
@require_admin_token
def cancel_order():
    body = parse_body(OrderIdRequest)
    if not get_services().licensing.cancel_order(body.id):
        return jsonify({
            'success': False,
            'error': 'order_not_found_or_not_pending',
            'message': 'Only pending orders can be cancelled',
        }), 404
    return jsonify({'success': True})
