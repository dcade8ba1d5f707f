"""Django settings for the Tillman test suite."""

SECRET_KEY = 'tillman-tests'

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'tillman',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

MIDDLEWARE = []

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

ROOT_URLCONF = 'tillman.tests.urls'
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

TILLMAN = {
    'ROW_STORE': 'tillman.adapters.memory.InMemoryRowStore',
    'PAYMENT_VERIFIER': 'tillman.adapters.noop.NoopPaymentVerifier',
    'HOLD_TTL_SECONDS': 180,
    'ADMIN_TOKEN': 'letmein',
}
