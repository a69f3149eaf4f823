"""
The CONTROLLER layer turns raw input (OBJ text) into MODEL objects.
"""
