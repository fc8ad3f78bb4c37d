"""appdeploy CLI commands"""
