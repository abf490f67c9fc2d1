# module confpay.app
from confpay.app_setup.factory import create_app

# App globale
app = create_app()
