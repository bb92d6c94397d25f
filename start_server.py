import os
import sys

# Serve the dashboard API from backend/ (flat imports)
backend_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'backend')
sys.path.insert(0, backend_dir)

import uvicorn

if __name__ == '__main__':
    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', '8000'))
    uvicorn.run('app:app', host=host, port=port, reload=False, app_dir=backend_dir)
