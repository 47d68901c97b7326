"""
LexiBridge - Main entry point
Production-ready startup with robust error handling
"""
import os
import sys

print("=" * 50)
print("LEXIBRIDGE STARTING")
print("=" * 50)
print(f"Python version: {sys.version}")
print(f"Working directory: {os.getcwd()}")
print("=" * 50)

try:
    print("Importing Flask application...")
    from lexibridge.app import create_app
    app = create_app()
    print("Flask application created successfully")
except Exception as e:
    print(f"ERROR creating Flask application: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    debug_mode = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    port = int(os.environ.get('PORT', '5000'))

    print(f"Starting Flask server on 0.0.0.0:{port}...")
    sys.stdout.flush()

    app.run(host='0.0.0.0', port=port, debug=debug_mode, threaded=True)
