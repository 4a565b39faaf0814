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

"""Custom exceptions for the storefront server."""


class StorefrontError(Exception):
  """Base class for all storefront exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class InvalidRequestError(StorefrontError):
  """Raised when the request is invalid (e.g. missing fields)."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_REQUEST", status_code=400)


class UnauthorizedError(StorefrontError):
  """Raised when a request carries no owner identity."""

  def __init__(self, message: str = "Authentication required"):
    super().__init__(message, code="UNAUTHORIZED", status_code=401)


class ForbiddenError(StorefrontError):
  """Raised when the caller does not own the store being modified."""

  def __init__(self, message: str = "Not allowed"):
    super().__init__(message, code="FORBIDDEN", status_code=403)


class ResourceNotFoundError(StorefrontError):
  """Raised when a requested resource is not found."""

  def __init__(self, message: str):
    super().__init__(message, code="RESOURCE_NOT_FOUND", status_code=404)


class ConflictError(StorefrontError):
  """Raised when a unique resource already exists (e.g. a store slug)."""

  def __init__(self, message: str):
    super().__init__(message, code="CONFLICT", status_code=409)


class SignatureVerificationError(StorefrontError):
  """Raised when a webhook payload fails signature verification."""

  def __init__(self, message: str):
    super().__init__(
        message, code="INVALID_SIGNATURE", status_code=400
    )


class ConfigurationError(StorefrontError):
  """Raised when a required secret or setting is missing."""

  def __init__(self, message: str):
    super().__init__(message, code="MISCONFIGURED", status_code=500)


class PaymentGatewayError(StorefrontError):
  """Raised when the payment platform rejects or fails a call."""

  def __init__(self, message: str):
    super().__init__(message, code="PAYMENT_GATEWAY_ERROR", status_code=500)


class CopywriterError(StorefrontError):
  """Raised when the language model call fails."""

  def __init__(self, message: str):
    super().__init__(message, code="COPYWRITER_ERROR", status_code=500)


class FulfillmentError(StorefrontError):
  """Raised when a paid session cannot be persisted; the platform retries."""

  def __init__(self, message: str):
    super().__init__(message, code="FULFILLMENT_FAILED", status_code=500)
