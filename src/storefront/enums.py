#   Copyright 2026 Storefront Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Enumerations for the storefront server.

This module defines the enums used to represent order state and the payment
platform events the webhook understands.
"""

import enum


class OrderStatus(str, enum.Enum):
  PAID = "paid"


class PaymentEventType(str, enum.Enum):
  CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
