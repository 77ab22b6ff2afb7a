#!/usr/bin/env python
"""
Main application entry point for the Fleet Subscription API.
"""
from fleetsub import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
