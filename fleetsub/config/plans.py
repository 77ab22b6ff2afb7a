"""
Subscription plan definitions loaded into the plan catalog at startup.
"""

PLAN_DEFINITIONS = [
    {
        'id': 'starter',
        'name': 'Starter',
        'price': 29,
        'trial_days': 14,
        'description': 'Perfect for small fleets',
        'features': {
            'maxDrivers': 25,
            'advancedAnalytics': False,
            'apiAccess': False,
            'customReports': False,
            'prioritySupport': False,
            'unlimitedDrivers': False,
            'customIntegrations': False,
            'dedicatedSupport': False,
            'slaGuarantee': False,
        },
    },
    {
        'id': 'professional',
        'name': 'Professional',
        'price': 79,
        'trial_days': 14,
        'description': 'For growing businesses',
        'features': {
            'maxDrivers': 100,
            'advancedAnalytics': True,
            'apiAccess': True,
            'customReports': True,
            'prioritySupport': True,
            'unlimitedDrivers': False,
            'customIntegrations': False,
            'dedicatedSupport': False,
            'slaGuarantee': False,
        },
    },
    {
        'id': 'enterprise',
        'name': 'Enterprise',
        'price': 299,
        'trial_days': 30,
        'description': 'For large organizations',
        'features': {
            # Ignored while unlimitedDrivers is set
            'maxDrivers': 0,
            'advancedAnalytics': True,
            'apiAccess': True,
            'customReports': True,
            'prioritySupport': True,
            'unlimitedDrivers': True,
            'customIntegrations': True,
            'dedicatedSupport': True,
            'slaGuarantee': True,
        },
    },
]
