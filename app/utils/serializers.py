"""Row → JSON dict conversion for every model the API returns."""


def iso(value):
    return value.isoformat() if value else None


def num(value):
    """DECIMAL columns come back as Decimal; JSON wants float."""
    return float(value) if value is not None else None


def serialize_user(user):
    type_info = user.type_info
    position_info = user.position_info
    return {
        "id": user.id,
        "user_name": user.user_name,
        "email": user.email,
        "phone": user.phone,
        "user_type": user.user_type,
        "user_position": user.user_position,
        "is_active": bool(user.is_active),
        "is_verified": bool(user.is_verified),
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
        "type": {
            "type_en_name": type_info.type_en_name,
            "type_ar_name": type_info.type_ar_name,
        }
        if type_info
        else None,
        "position": {
            "position_en_name": position_info.position_en_name,
            "position_ar_name": position_info.position_ar_name,
        }
        if position_info
        else None,
    }


def serialize_session_user(user):
    """Shape of the signed-in user kept in the session token."""
    return {
        "id": user.id,
        "name": user.user_name,
        "email": user.email,
        "phone": user.phone,
        "userType": user.user_type,
        "userPosition": user.user_position,
        "isVerified": bool(user.is_verified),
        "isActive": bool(user.is_active),
    }


def user_ref(user):
    if not user:
        return None
    return {"id": user.id, "user_name": user.user_name, "email": user.email}


def developer_ref(developer):
    if not developer:
        return None
    return {"id": developer.id, "company_name": developer.company_name}


def shop_ref(shop):
    if not shop:
        return None
    return {"id": shop.id, "title": shop.title}


def serialize_mall(mall):
    return {
        "id": mall.id,
        "ar_name": mall.ar_name,
        "en_name": mall.en_name,
        "description": mall.description,
        "address": mall.address,
        "city": mall.city,
        "district": mall.district,
        "developer_id": mall.developer_id,
        "total_area": mall.total_area,
        "total_floors": mall.total_floors,
        "parking_spaces": mall.parking_spaces,
        "construction_status": mall.construction_status,
        "completion_date": iso(mall.completion_date),
        "is_active": bool(mall.is_active),
        "created_at": iso(mall.created_at),
        "updated_at": iso(mall.updated_at),
        "developer": developer_ref(mall.developer),
    }


def serialize_shop(shop):
    mall = shop.mall
    category = shop.category_type
    return {
        "id": shop.id,
        "title": shop.title,
        "mall_id": shop.mall_id,
        "category_type_id": shop.category_type_id,
        "shop_number": shop.shop_number,
        "floor_number": shop.floor_number,
        "phone_number": shop.phone_number,
        "whatsapp_number": shop.whatsapp_number,
        "email": shop.email,
        "unit_area": shop.unit_area,
        "monthly_rent": num(shop.monthly_rent),
        "sale_price": num(shop.sale_price),
        "sale_type": shop.sale_type,
        "finishing_type": shop.finishing_type,
        "delivery_date": iso(shop.delivery_date),
        "status": shop.status,
        "description": shop.description,
        "view_type": shop.view_type,
        "is_corner_shop": bool(shop.is_corner_shop),
        "has_storage": bool(shop.has_storage),
        "electricity_capacity": shop.electricity_capacity,
        "security_deposit": num(shop.security_deposit),
        "is_active": bool(shop.is_active),
        "created_at": iso(shop.created_at),
        "updated_at": iso(shop.updated_at),
        "mall": {"id": mall.id, "ar_name": mall.ar_name, "en_name": mall.en_name}
        if mall
        else None,
        "category_type": {
            "id": category.id,
            "type_en_name": category.type_en_name,
            "type_ar_name": category.type_ar_name,
        }
        if category
        else None,
    }


def serialize_booking(booking):
    return {
        "id": booking.id,
        "shop_id": booking.shop_id,
        "user_id": booking.user_id,
        "developer_id": booking.developer_id,
        "booking_type": booking.booking_type,
        "start_date": iso(booking.start_date),
        "end_date": iso(booking.end_date),
        "monthly_amount": num(booking.monthly_amount),
        "total_amount": num(booking.total_amount),
        "security_deposit": num(booking.security_deposit),
        "commission_amount": num(booking.commission_amount),
        "contract_duration": booking.contract_duration,
        "status": booking.status,
        "payment_status": booking.payment_status,
        "contract_file": booking.contract_file,
        "notes": booking.notes,
        "created_at": iso(booking.created_at),
        "updated_at": iso(booking.updated_at),
        "shop": shop_ref(booking.shop),
        "user": user_ref(booking.user),
        "developer": developer_ref(booking.developer),
    }


def serialize_payment(payment):
    booking = payment.booking
    return {
        "id": payment.id,
        "booking_id": payment.booking_id,
        "user_id": payment.user_id,
        "amount": num(payment.amount),
        "payment_type": payment.payment_type,
        "payment_method": payment.payment_method,
        "payment_status": payment.payment_status,
        "transaction_id": payment.transaction_id,
        "payment_gateway_response": payment.payment_gateway_response,
        "due_date": iso(payment.due_date),
        "paid_at": iso(payment.paid_at),
        "created_at": iso(payment.created_at),
        "updated_at": iso(payment.updated_at),
        "booking": {"id": booking.id, "shop": shop_ref(booking.shop)}
        if booking
        else None,
        "user": user_ref(payment.user),
    }


def serialize_inquiry(inquiry):
    return {
        "id": inquiry.id,
        "shop_id": inquiry.shop_id,
        "user_id": inquiry.user_id,
        "developer_id": inquiry.developer_id,
        "inquiry_type": inquiry.inquiry_type,
        "message": inquiry.message,
        "contact_preference": inquiry.contact_preference,
        "preferred_contact_time": inquiry.preferred_contact_time,
        "status": inquiry.status,
        "response": inquiry.response,
        "responded_at": iso(inquiry.responded_at),
        "created_at": iso(inquiry.created_at),
        "updated_at": iso(inquiry.updated_at),
        "shop": shop_ref(inquiry.shop),
        "user": user_ref(inquiry.user),
        "developer": developer_ref(inquiry.developer),
    }


def serialize_notification(notification):
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "related_id": notification.related_id,
        "is_read": bool(notification.is_read),
        "created_at": iso(notification.created_at),
        "user": user_ref(notification.user),
    }


def serialize_security_event(event):
    return {
        "id": event.id,
        "type": event.event_type,
        "user": event.user_email,
        "ip": event.ip_address,
        "device": event.device,
        "status": event.status,
        "timestamp": iso(event.created_at),
    }


def serialize_session(session, current_jti=None):
    return {
        "id": session.id,
        "user": session.user.email if session.user else None,
        "ip": session.ip_address,
        "device": session.device,
        "created_at": iso(session.created_at),
        "lastActivity": iso(session.last_activity),
        "expires_at": iso(session.expires_at),
        "current": current_jti is not None and session.token_jti == current_jti,
    }
