from flatlog import create_app

# Create an app instance
app = create_app()

if __name__ == '__main__':
    port = int(app.config.get('PORT', 3000))
    print(f"Serving {app.config['ML_BLOG_NAME']} at http://localhost:{port}")
    app.run(port=port)
