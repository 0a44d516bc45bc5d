"""Multiplayer wire protocol, session state and non-blocking TCP transport."""