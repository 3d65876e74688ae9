"""
Erreurs métier de la boutique.
- Chaque erreur porte un status_code HTTP, traduit en {statusCode, message}
  par storefront.app_setup.exceptions.
"""

class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class CheckoutValidationError(StorefrontError):
    """Montant hors bornes ou panier illisible (avant tout appel Stripe)."""
    status_code = 400


class PaymentProviderError(StorefrontError):
    """Stripe a refusé la création de la session."""
    status_code = 500


class WebhookSignatureError(StorefrontError):
    """Signature Stripe absente ou invalide: seule barrière d'authentification du webhook."""
    status_code = 400


class ReconciliationError(StorefrontError):
    """Paiement encaissé mais commande impossible à créer (métadonnées, stockage)."""
    status_code = 500

    def __init__(self, message: str, session_id: str | None = None):
        super().__init__(message)
        self.session_id = session_id


class OrderNotFoundError(StorefrontError):
    status_code = 404


class StorageError(StorefrontError):
    status_code = 500
