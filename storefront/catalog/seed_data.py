"""
Seed catalogue for the storefront: categories and supplement products.

Prices are in INR.
"""
from decimal import Decimal

CLOUD_IMAGE_BASE = 'https://res.cloudinary.com/duscymcfc/image/upload/v1/products'

CATEGORIES = [
    {
        'name': 'Protein',
        'slug': 'protein',
        'description': 'High-quality protein supplements for muscle building and recovery',
        'image': '/images/categories/Protein.png',
        'sort_order': 1,
    },
    {
        'name': 'Pre-Workout',
        'slug': 'pre-workout',
        'description': 'Energy and performance boosters for intense workouts',
        'image': '/images/categories/Pre-workout-1753207770.png',
        'sort_order': 2,
    },
    {
        'name': 'Creatine',
        'slug': 'creatine',
        'description': 'Strength and power supplements for enhanced performance',
        'image': '/images/categories/Creatine-1753207660.png',
        'sort_order': 3,
    },
    {
        'name': 'Amino Acids',
        'slug': 'amino-acids',
        'description': 'Essential amino acids for muscle recovery and growth',
        'image': '/images/categories/AMINO ACID.png',
        'sort_order': 4,
    },
    {
        'name': 'Vitamins',
        'slug': 'vitamins',
        'description': 'Essential vitamins and minerals for overall health',
        'image': '/images/categories/vitamin.png',
        'sort_order': 5,
    },
    {
        'name': 'Omega-3',
        'slug': 'omega-3',
        'description': 'Essential fatty acids for heart and brain health',
        'image': '/images/categories/Omega 3.jpeg',
        'sort_order': 6,
    },
    {
        'name': 'Mass Gainer',
        'slug': 'mass-gainer',
        'description': 'High-calorie supplements for weight and muscle gain',
        'image': '/images/categories/Mass gainer.png',
        'sort_order': 7,
    },
    {
        'name': 'Fat Burners',
        'slug': 'fat-burners',
        'description': 'Weight management and fat burning supplements',
        'image': '/images/categories/Fat burner.png',
        'sort_order': 8,
    },
]


def _product(name, description, price, category, brand, image, tags, serving_size, calories, protein,
             stock_quantity, additional_info=''):
    return {
        'name': name,
        'description': description,
        'price': Decimal(price),
        'category': category,
        'brand': brand,
        'images': [f'{CLOUD_IMAGE_BASE}/{image}'],
        'tags': tags,
        'nutrition_facts': {
            'serving_size': serving_size,
            'calories': calories,
            'protein': protein,
            'additional_info': additional_info,
        },
        'in_stock': stock_quantity > 0,
        'stock_quantity': stock_quantity,
        'best_seller': 'best sellers' in tags,
    }


WHEY_PRODUCTS = [
    _product(
        'Nutrabay Gold 100% Whey Protein Concentrate',
        'Premium whey protein concentrate with 24g protein per serving. Enhanced with digestive enzymes '
        'for better absorption. Perfect for muscle building and recovery.',
        '2499', 'Protein', 'Nutrabay',
        'product-1229-featured_image-Nutrabay_Gold_100_Whey_Protein_Concentrate.jpg.jpeg',
        ['best sellers', 'protein', 'whey', 'muscle building'], '30g', 120, '24g', 50,
        'Contains all 9 essential amino acids, 5.5g BCAAs per serving',
    ),
    _product(
        'MuscleBlaze Whey Gold 100% Whey Protein',
        'Ultra-premium whey protein isolate and concentrate blend. 25g protein per serving with enhanced '
        'amino acid profile for superior muscle growth.',
        '3299', 'Protein', 'MuscleBlaze', 'NB-MBZ-1010-04-01-800x800.jpg.jpeg',
        ['best sellers', 'protein', 'whey', 'premium'], '33g', 132, '25g', 45,
        'Whey isolate and concentrate blend, 5.9g BCAAs, 4.3g glutamic acid',
    ),
    _product(
        'Optimum Nutrition Gold Standard 100% Whey',
        "The world's best-selling whey protein. 24g of high-quality whey protein per serving with 5.5g "
        'naturally occurring BCAAs.',
        '4199', 'Protein', 'Optimum Nutrition', 'NB-OPT-1012-04-01-800x800.jpg.jpeg',
        ['best sellers', 'protein', 'whey', 'international'], '30.4g', 120, '24g', 35,
        '5.5g BCAAs, 4g glutamine and glutamic acid, instantized for easy mixing',
    ),
    _product(
        'Nutrabay Pure 100% Whey Protein Isolate',
        'Ultra-pure whey protein isolate with 27g protein per serving. Zero carbs, zero fat, lactose-free '
        'formula for lean muscle building.',
        '3799', 'Protein', 'Nutrabay', 'NB-NUT-1040-01-01-800x800.jpg.jpeg',
        ['protein', 'whey', 'isolate', 'lactose-free'], '30g', 110, '27g', 40,
        '90% protein content, fast absorption, ideal for cutting phase',
    ),
    _product(
        'MuscleBlaze Biozyme Performance Whey',
        'Advanced whey protein with enhanced absorption technology. 25g protein with digestive enzymes for '
        'maximum bioavailability.',
        '2899', 'Protein', 'MuscleBlaze', 'NB-MBZ-1031-01-01-800x800.jpg.jpeg',
        ['protein', 'whey', 'digestive enzymes', 'performance'], '33g', 130, '25g', 55,
        'Enhanced with digestive enzymes, 5.8g BCAAs, clinically tested',
    ),
]

MASS_GAINER_PRODUCTS = [
    _product(
        'Kevin Levrone Anabolic Mass Gainer',
        'Premium mass gainer with 40g protein and fast-acting carbs for muscle growth. Enhanced with '
        'creatine and digestive enzymes for maximum results.',
        '3299', 'Mass Gainer', 'Kevin Levrone',
        'product-283-featured_image-Kevin_Levrone_Anabolic_Mass_Gainer.jpg.jpeg',
        ['best sellers', 'mass gainer', 'muscle building', 'high calorie'], '100g', 376, '40g', 25,
        'Enhanced with creatine monohydrate, digestive enzymes, and vitamins',
    ),
    _product(
        'MuscleBlaze Mass Gainer XXL',
        'High-calorie mass gainer with complex carbs and quality protein. Perfect for hard gainers looking '
        'to build serious muscle mass.',
        '2899', 'Mass Gainer', 'MuscleBlaze',
        'product-2661-featured_image-MuscleBlaze_Mass_Gainer_XXL.jpg.jpeg',
        ['best sellers', 'mass gainer', 'high calorie', 'muscle building'], '75g', 300, '15g', 40,
        'Complex carbs blend, added vitamins and minerals, digestive enzymes',
    ),
    _product(
        'Labrada Muscle Mass Gainer',
        'Premium mass gainer with high-quality protein and complex carbohydrates. Designed for serious '
        'athletes and bodybuilders.',
        '3599', 'Mass Gainer', 'Labrada',
        'product-2643-featured_image-Labrada_Muscle_Mass_Gainer.jpg.jpeg',
        ['mass gainer', 'premium', 'muscle building', 'high protein'], '85g', 340, '20g', 30,
        'Lean lipids, complex carbs, added creatine and glutamine',
    ),
    _product(
        'Labrada Super Mass Gainer',
        'Ultra-high calorie mass gainer for extreme muscle building. Perfect for hard gainers who need '
        'maximum caloric density.',
        '4199', 'Mass Gainer', 'Labrada',
        'product-4293-featured_image-Labrada_Super_Mass_Gainer.jpg.jpeg',
        ['mass gainer', 'high calorie', 'extreme', 'hard gainers'], '120g', 510, '30g', 20,
        'Ultra-high calorie formula, premium protein blend, added BCAAs',
    ),
]

PRE_WORKOUT_PRODUCTS = [
    _product(
        'MuscleBlaze WrathX Pre-Workout',
        'High-stimulant pre-workout with 300mg caffeine and performance enhancers. Explosive energy, focus, '
        'and pump for intense training sessions.',
        '1899', 'Pre-Workout', 'MuscleBlaze',
        'product-8-featured_image-MuscleBlaze_Wrathx_PreWorkout.jpg.jpeg',
        ['best sellers', 'pre-workout', 'energy', 'focus', 'pump'], '10g', 5, '0g', 60,
    ),
    _product(
        'Nutrabay Gold Spark Pre-Workout',
        'Advanced pre-workout formula with clinically dosed ingredients. Enhanced focus, energy, and '
        'endurance for peak performance.',
        '1699', 'Pre-Workout', 'Nutrabay',
        'product-1775-featured_image-Nutrabay_Gold_Spark_PreWorkout.jpg.jpeg',
        ['best sellers', 'pre-workout', 'clinically dosed', 'performance'], '12g', 8, '0g', 45,
    ),
    _product(
        'MuscleTech Vapor X5 Next Gen',
        'Next-generation pre-workout with explosive energy and enhanced pump. Advanced formula for serious '
        'athletes and bodybuilders.',
        '2299', 'Pre-Workout', 'MuscleTech',
        'product-3284-featured_image-MuscleTech_Vapor_X5_Next_Gen.jpg.jpeg',
        ['pre-workout', 'premium', 'explosive energy', 'pump'], '15g', 10, '0g', 35,
    ),
    _product(
        'ProSupps Hyde Xtreme Hard-Hitting Energy',
        'Extreme pre-workout with maximum stimulants and focus enhancers. For experienced users seeking '
        'intense energy and performance.',
        '2599', 'Pre-Workout', 'ProSupps',
        'product-3506-featured_image-ProSupps_Hyde_Xtreme_HardHitting_Energy_Pre_Workout.jpg.jpeg',
        ['pre-workout', 'extreme', 'high stimulant', 'focus'], '7.5g', 0, '0g', 25,
    ),
    _product(
        'Naturaltein Pure 07 Pre-Workout',
        'Clean pre-workout formula with natural ingredients. Sustained energy without crash, perfect for '
        'daily training.',
        '1499', 'Pre-Workout', 'Naturaltein',
        'product-353-featured_image-Naturaltein_Pure_07_Preworkout.jpg.jpeg',
        ['pre-workout', 'natural', 'clean formula', 'no crash'], '8g', 5, '0g', 50,
    ),
]

VITAMIN_PRODUCTS = [
    _product(
        'Neuherbs Deep Sea Omega 3 Fish Oil',
        'Premium omega-3 fish oil with high EPA and DHA content. Supports heart health, brain function, and '
        'joint mobility. Triple strength formula.',
        '1299', 'Omega-3', 'Neuherbs',
        'product-746-featured_image-Neuherbs_Deep_Sea_Omega_3_Fish_Oil__Omega_3_Supplement_Triple_Strength'
        '_2500_Mg__for_Men_and_Women.jpg.jpeg',
        ['best sellers', 'omega-3', 'heart health', 'brain health', 'fish oil'], '2 softgels', 20, '0g', 75,
    ),
    _product(
        'HealthAid Omega 3 750mg EPA 425mg DHA 325mg',
        'High-potency omega-3 supplement with optimal EPA to DHA ratio. Molecularly distilled for purity '
        'and potency.',
        '1599', 'Omega-3', 'HealthAid',
        'product-2938-featured_image-HealthAid_Omega_3_750mg_EPA_425mg_DHA_325mg.jpg.jpeg',
        ['omega-3', 'high potency', 'EPA', 'DHA', 'heart health'], '1 softgel', 10, '0g', 50,
    ),
    _product(
        'GNC Creatine Monohydrate',
        'Pure creatine monohydrate for enhanced strength, power, and muscle growth. Micronized for better '
        'absorption and mixing.',
        '1199', 'Creatine', 'GNC',
        'product-2595-featured_image-GNC_Creatine_Monohydrate.jpg.jpeg',
        ['best sellers', 'creatine', 'strength', 'power', 'muscle growth'], '5g', 0, '0g', 80,
    ),
    _product(
        'Nutrabay Pure Creatine Monohydrate Micronized',
        'Ultra-pure micronized creatine monohydrate. Enhances athletic performance, strength, and muscle '
        'volume. Unflavored and easy to mix.',
        '899', 'Creatine', 'Nutrabay',
        'product-3063-featured_image-Nutrabay_Pure_Creatine_Monohydrate_Micronized.jpg.jpeg',
        ['creatine', 'micronized', 'performance', 'strength', 'unflavored'], '3g', 0, '0g', 90,
    ),
    _product(
        'MuscleBlaze Creatine Monohydrate CreAMP',
        'Advanced creatine formula with enhanced absorption technology. Supports explosive strength, power, '
        'and muscle growth.',
        '1399', 'Creatine', 'MuscleBlaze',
        'product-3743-featured_image-MuscleBlaze_Creatine_Monohydrate_Cre_AMP.jpg.jpeg',
        ['creatine', 'enhanced absorption', 'strength', 'power', 'muscle growth'], '5g', 0, '0g', 65,
    ),
    _product(
        'Naturaltein Vitamin D3K2',
        'Synergistic combination of Vitamin D3 and K2 for optimal bone health and calcium absorption. '
        'Essential for immune function.',
        '799', 'Vitamins', 'Naturaltein',
        'product-3976-featured_image-Naturaltein_Vitamin_D3K2.jpg.jpeg',
        ['vitamin D3', 'vitamin K2', 'bone health', 'immune support', 'calcium absorption'],
        '1 tablet', 0, '0g', 70,
    ),
]

PRODUCT_GROUPS = {
    'whey': WHEY_PRODUCTS,
    'mass-gainers': MASS_GAINER_PRODUCTS,
    'pre-workouts': PRE_WORKOUT_PRODUCTS,
    'vitamins': VITAMIN_PRODUCTS,
}

# Market prices used when converting the original USD catalogue
INR_PRICE_TABLE = {
    'BBN Whey Protein Isolate': (Decimal('4999'), Decimal('6499')),
    'BBN Pre-Workout Elite': (Decimal('3499'), Decimal('4299')),
    'BBN Creatine Monohydrate': (Decimal('1999'), Decimal('2499')),
    'BBN BCAA Amino Acids': (Decimal('2799'), Decimal('3299')),
    'BBN Multivitamin Complete': (Decimal('2399'), Decimal('2899')),
    'BBN Mass Gainer': (Decimal('5999'), Decimal('7499')),
    'BBN Fat Burner': (Decimal('3299'), Decimal('3999')),
    'BBN Omega-3': (Decimal('1899'), Decimal('2299')),
    'BBN Glutamine': (Decimal('2199'), Decimal('2699')),
    'BBN Casein Protein': (Decimal('5499'), Decimal('6999')),
}
USD_TO_INR_RATE = Decimal('83')
